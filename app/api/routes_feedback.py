"""
Feedback pages
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_api, get_event_service, get_identity
from app.core.access import Capability, has_capability
from app.core.errors import APIError
from app.schemas.feedback import Feedback, FeedbackCreate
from app.schemas.user import Identity
from app.services.actions import feedback_control
from app.services.api_client import DashboardAPI
from app.services.event_service import EventService, can_modify_event, managed_events
from app.services.filtering import TITLE_SEARCH_FIELDS, FilterSpec, filter_items
from app.utils.responses import forbidden_error, success_response

logger = logging.getLogger(__name__)

router = APIRouter()

def summarize(feedback: List[Feedback]) -> dict:
    """Count and average rating of a batch of feedback"""
    if not feedback:
        return {"count": 0, "average_rating": None}
    average = sum(item.rating for item in feedback) / len(feedback)
    return {"count": len(feedback), "average_rating": round(average, 2)}

def own_feedback(feedback: List[Feedback], identity: Identity) -> Optional[Feedback]:
    """The caller's entry; entries without a user id come from the per-user view"""
    for item in feedback:
        if item.user_id is None or item.user_id == identity.id:
            return item
    return None

@router.get("")
async def list_feedback(
    q: str = "",
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Events the caller attended, with their feedback control"""
    events = await api.list_events(attended=True)
    visible = filter_items(events, FilterSpec(query=q, text_fields=TITLE_SEARCH_FIELDS))

    return success_response(
        message="Attended events retrieved successfully",
        data={
            "events": [
                {"event": event, "feedback": feedback_control(event)}
                for event in visible
            ],
            "can_view_all": has_capability(identity.role, Capability.VIEW_ALL_FEEDBACK),
        }
    )

@router.get("/manage")
async def manage_feedback(
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Events whose feedback the caller may read"""
    events = managed_events(identity, await api.list_events())
    return success_response(
        message="Managed events retrieved successfully",
        data={"events": events}
    )

@router.get("/manage/{event_id}")
async def event_feedback(
    event_id: str,
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """All feedback left on one event"""
    event = await api.get_event(event_id)
    if not can_modify_event(identity, event):
        forbidden_error("You can only view feedback for events you organize")

    feedback = await api.get_feedback(event.id)
    return success_response(
        message="Event feedback retrieved",
        data={"event": event, "feedback": feedback, "summary": summarize(feedback)}
    )

@router.get("/{event_id}")
async def get_feedback_form(
    event_id: str,
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Feedback form for one event, with the caller's earlier feedback if any"""
    event = await api.get_event(event_id)

    existing = None
    if event.has_feedback:
        try:
            submitted = await api.get_feedback(event.id)
        except APIError as e:
            logger.warning(f"Could not load feedback for event {event.id}: {e.message}")
            submitted = []
        existing = own_feedback(submitted, identity)

    return success_response(
        message="Feedback details retrieved",
        data={
            "event": event,
            "feedback": existing,
            "control": feedback_control(event),
        }
    )

@router.post("/{event_id}")
async def submit_feedback(
    event_id: str,
    form: FeedbackCreate,
    api: DashboardAPI = Depends(get_api),
    service: EventService = Depends(get_event_service)
):
    """Submit the caller's feedback for an event they attended"""
    event = await api.get_event(event_id)
    patched, feedback = await service.submit_feedback(event, form)

    return success_response(
        message="Thank you for your feedback!",
        data={"event": patched, "feedback": feedback, "control": feedback_control(patched)},
        status_code=201
    )
