"""
Rules shared by the mutating actions: local preconditions, control states
and the patches applied to a local entity after the server accepted a change.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Hashable, Optional, Set, Tuple

from pydantic import BaseModel

from app.core.errors import DuplicateSubmission, ValidationFailure
from app.schemas.common import ControlState
from app.schemas.event import Event
from app.services.filtering import item_instant

REGISTERED_LABEL = "You are registered for this event"
CAPACITY_LABEL = "This event has reached capacity"
PAST_LABEL = "This event has already taken place"
OPEN_LABEL = "Register to attend this event"

def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()

def is_past(event: Event, now: Optional[datetime] = None) -> bool:
    instant = item_instant(event)
    return instant is not None and instant < _now(now)

# -------- Control states --------

def registration_control(event: Event, now: Optional[datetime] = None) -> ControlState:
    if event.is_registered:
        return ControlState(enabled=False, label=REGISTERED_LABEL)
    if event.is_full:
        return ControlState(enabled=False, label=CAPACITY_LABEL)
    if is_past(event, now):
        return ControlState(enabled=False, label=PAST_LABEL)
    return ControlState(enabled=True, label=OPEN_LABEL)

def attendance_control(event: Event, now: Optional[datetime] = None) -> ControlState:
    if event.has_attended:
        return ControlState(enabled=False, label="View Attendance")
    if not is_past(event, now):
        return ControlState(enabled=False, label="Not Started Yet")
    return ControlState(enabled=True, label="Mark Attendance")

def feedback_control(event: Event, now: Optional[datetime] = None) -> ControlState:
    if event.has_feedback:
        return ControlState(enabled=False, label="View Feedback")
    if not is_past(event, now):
        return ControlState(enabled=False, label="Not Started Yet")
    if not event.has_attended:
        return ControlState(enabled=False, label="Attendance Required")
    return ControlState(enabled=True, label="Give Feedback")

# -------- Preconditions --------

def check_can_register(event: Event, now: Optional[datetime] = None) -> None:
    control = registration_control(event, now)
    if not control.enabled:
        raise ValidationFailure(control.label)

def check_can_mark_attendance(event: Event, now: Optional[datetime] = None) -> None:
    if event.has_attended:
        raise ValidationFailure("Your attendance has already been recorded")
    if not is_past(event, now):
        raise ValidationFailure("Attendance can only be marked after the event has started")

def check_can_submit_feedback(event: Event, now: Optional[datetime] = None) -> None:
    if event.has_feedback:
        raise ValidationFailure("You have already submitted feedback for this event")
    if not is_past(event, now):
        raise ValidationFailure("Feedback can only be given after the event has taken place")
    if not event.has_attended:
        raise ValidationFailure("Only attendees can give feedback for this event")

# -------- Optimistic patches --------

def registration_patch(event: Event) -> Dict[str, Any]:
    return {"is_registered": True, "attendee_count": event.attendee_count + 1}

ATTENDANCE_PATCH: Dict[str, Any] = {"has_attended": True}
FEEDBACK_PATCH: Dict[str, Any] = {"has_feedback": True}

def apply_patch(entity: BaseModel, patch: Dict[str, Any]) -> BaseModel:
    """Return a copy of entity with patch applied; entity itself is untouched"""
    return entity.model_copy(update=patch)

# -------- In-flight guard --------

class InFlightGuard:
    """Rejects a second submission of an action while the first is pending.

    This only protects one process; the upstream API stays the authority on
    duplicates.
    """

    def __init__(self):
        self._pending: Set[Tuple[Hashable, ...]] = set()

    def is_pending(self, *key: Hashable) -> bool:
        return key in self._pending

    @contextmanager
    def claim(self, *key: Hashable):
        if key in self._pending:
            raise DuplicateSubmission("This request is already being processed")
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)

# Shared by every request served by this process
submission_guard = InFlightGuard()
