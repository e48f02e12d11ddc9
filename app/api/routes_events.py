"""
Event pages: list, detail, create, edit, delete and registration
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_api, get_event_service, get_identity, require_capability
from app.core.access import Capability, has_capability
from app.schemas.event import EVENT_TYPES, EventCreate
from app.schemas.user import Identity
from app.services.actions import is_past, registration_control
from app.services.api_client import DashboardAPI
from app.services.event_service import EventService, can_modify_event
from app.services.filtering import (
    EVENT_SEARCH_FIELDS,
    DateBucket,
    FilterSpec,
    distinct_values,
    filter_items,
)
from app.utils.responses import forbidden_error, success_response

router = APIRouter()

@router.get("")
async def list_events(
    q: str = "",
    type: str = "",
    location: str = "",
    date: str = "",
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """List events, filtered by search text, type, location and date"""
    events = await api.list_events()

    spec = FilterSpec(
        query=q,
        text_fields=EVENT_SEARCH_FIELDS,
        categories={"type": type, "location": location},
        date_bucket=DateBucket.parse(date),
    )
    visible = filter_items(events, spec)

    return success_response(
        message="Events retrieved successfully",
        data={
            "events": visible,
            "total": len(events),
            "filtered": not spec.is_empty,
            "filters": {
                "types": distinct_values(events, "type"),
                "locations": distinct_values(events, "location"),
                "dates": [bucket.value for bucket in DateBucket],
            },
            "can_create": has_capability(identity.role, Capability.CREATE_EVENT),
        }
    )

@router.get("/create")
async def create_event_form(
    session=Depends(require_capability(Capability.CREATE_EVENT))
):
    """Form metadata for a new event"""
    return success_response(
        message="Event form",
        data={"event_types": list(EVENT_TYPES)}
    )

@router.post("/create")
async def create_event(
    form: EventCreate,
    session=Depends(require_capability(Capability.CREATE_EVENT)),
    service: EventService = Depends(get_event_service)
):
    """Create a new event"""
    event = await service.create(form)
    return success_response(
        message="Your event has been created successfully",
        data={"event": event, "redirect": f"/events/{event.id}"},
        status_code=201
    )

@router.get("/edit/{event_id}")
async def edit_event_form(
    event_id: str,
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Current event values for the edit form"""
    event = await api.get_event(event_id)
    if not can_modify_event(identity, event):
        forbidden_error("You can only edit events you organize")

    return success_response(
        message="Event form",
        data={"event": event, "event_types": list(EVENT_TYPES)}
    )

@router.post("/edit/{event_id}")
async def edit_event(
    event_id: str,
    form: EventCreate,
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api),
    service: EventService = Depends(get_event_service)
):
    """Save changes to an event"""
    event = await api.get_event(event_id)
    if not can_modify_event(identity, event):
        forbidden_error("You can only edit events you organize")

    updated = await service.update(event, form)
    return success_response(
        message="The event has been updated successfully",
        data={"event": updated, "redirect": f"/events/{updated.id}"}
    )

@router.get("/{event_id}")
async def get_event_details(
    event_id: str,
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Event details with the controls the caller may use"""
    event = await api.get_event(event_id)
    can_modify = can_modify_event(identity, event)

    return success_response(
        message="Event details retrieved",
        data={
            "event": event,
            "is_past": is_past(event),
            "can_edit": can_modify,
            "can_delete": can_modify,
            "registration": registration_control(event),
        }
    )

@router.post("/{event_id}/register")
async def register_for_event(
    event_id: str,
    api: DashboardAPI = Depends(get_api),
    service: EventService = Depends(get_event_service)
):
    """Register the caller for an event"""
    event = await api.get_event(event_id)
    registered = await service.register(event)

    return success_response(
        message="You have successfully registered for this event",
        data={"event": registered, "registration": registration_control(registered)}
    )

@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api),
    service: EventService = Depends(get_event_service)
):
    """Delete an event"""
    event = await api.get_event(event_id)
    if not can_modify_event(identity, event):
        forbidden_error("You can only delete events you organize")

    await service.delete(event)
    return success_response(
        message="The event has been successfully deleted",
        data={"deleted_event_id": event.id, "redirect": "/events"}
    )
