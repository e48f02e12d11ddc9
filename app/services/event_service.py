"""
Event actions: create, edit, delete, register, attendance and feedback
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from app.core.access import Capability, Role, has_capability
from app.core.errors import ValidationFailure
from app.schemas.event import Event, EventCreate
from app.schemas.feedback import Feedback, FeedbackCreate
from app.schemas.user import Identity
from app.services.actions import (
    ATTENDANCE_PATCH,
    FEEDBACK_PATCH,
    InFlightGuard,
    apply_patch,
    check_can_mark_attendance,
    check_can_register,
    check_can_submit_feedback,
    registration_patch,
    submission_guard,
)
from app.services.api_client import DashboardAPI

logger = logging.getLogger(__name__)

def owns_event(identity: Identity, event: Event) -> bool:
    return event.organizer_id is not None and event.organizer_id == identity.id

def can_modify_event(identity: Identity, event: Event) -> bool:
    """Admins and managers may change any event; organizers only their own"""
    if identity.role in (Role.ADMIN, Role.MANAGER):
        return True
    return identity.role is Role.ORGANIZER and owns_event(identity, event)

def managed_events(identity: Identity, events: List[Event]) -> List[Event]:
    """Events whose attendance and feedback the identity may oversee"""
    if not has_capability(identity.role, Capability.MANAGE_ATTENDANCE):
        return []
    return [event for event in events if can_modify_event(identity, event)]

class EventService:
    """Service for event mutations made on behalf of one session"""

    def __init__(self, api: DashboardAPI, identity: Identity, guard: InFlightGuard = submission_guard):
        self.api = api
        self.identity = identity
        self.guard = guard

    def _key(self, action: str, entity_id: str):
        return (self.api.token, action, entity_id)

    async def register(self, event: Event, now: Optional[datetime] = None) -> Event:
        """Register for an event and return it patched"""
        check_can_register(event, now)
        with self.guard.claim(*self._key("register", event.id)):
            await self.api.register_for_event(event.id)
        logger.info(f"User {self.identity.id} registered for event {event.id}")
        return apply_patch(event, registration_patch(event))

    async def mark_attendance(self, event: Event, code: str, now: Optional[datetime] = None) -> Event:
        """Record attendance with the one-time code and return the event patched"""
        code = (code or "").strip()
        if not code:
            raise ValidationFailure("Attendance code is required")
        check_can_mark_attendance(event, now)
        with self.guard.claim(*self._key("attendance", event.id)):
            await self.api.mark_attendance(event.id, code)
        logger.info(f"User {self.identity.id} marked attendance for event {event.id}")
        return apply_patch(event, ATTENDANCE_PATCH)

    async def submit_feedback(
        self,
        event: Event,
        form: FeedbackCreate,
        now: Optional[datetime] = None,
    ) -> Tuple[Event, Optional[Feedback]]:
        """Submit feedback; returns the patched event and the stored feedback, if echoed"""
        check_can_submit_feedback(event, now)
        with self.guard.claim(*self._key("feedback", event.id)):
            feedback = await self.api.submit_feedback(event.id, form)
        logger.info(f"User {self.identity.id} left feedback on event {event.id}")
        return apply_patch(event, FEEDBACK_PATCH), feedback

    async def create(self, form: EventCreate) -> Event:
        with self.guard.claim(*self._key("create-event", form.title)):
            event = await self.api.create_event(form)
        logger.info(f"Event {event.id} created by {self.identity.id}")
        return event

    async def update(self, event: Event, form: EventCreate) -> Event:
        with self.guard.claim(*self._key("edit-event", event.id)):
            updated = await self.api.update_event(event.id, form)
        logger.info(f"Event {event.id} updated by {self.identity.id}")
        return updated

    async def delete(self, event: Event) -> None:
        with self.guard.claim(*self._key("delete-event", event.id)):
            await self.api.delete_event(event.id)
        logger.info(f"Event {event.id} deleted by {self.identity.id}")

