"""
Attendance pages
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_api, get_event_service, get_identity
from app.core.access import Capability, has_capability
from app.schemas.feedback import AttendanceCode
from app.schemas.user import Identity
from app.services.actions import attendance_control, is_past
from app.services.api_client import DashboardAPI
from app.services.event_service import EventService, managed_events
from app.services.filtering import TITLE_SEARCH_FIELDS, FilterSpec, filter_items
from app.utils.responses import success_response

router = APIRouter()

@router.get("")
async def list_attendance(
    q: str = "",
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Events the caller registered for, with their attendance control"""
    events = await api.list_events(registered=True)
    visible = filter_items(events, FilterSpec(query=q, text_fields=TITLE_SEARCH_FIELDS))

    return success_response(
        message="Registered events retrieved successfully",
        data={
            "events": [
                {"event": event, "attendance": attendance_control(event)}
                for event in visible
            ],
            "can_manage": has_capability(identity.role, Capability.MANAGE_ATTENDANCE),
        }
    )

@router.get("/manage")
async def manage_attendance(
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Events whose attendance the caller oversees"""
    events = managed_events(identity, await api.list_events())
    return success_response(
        message="Managed events retrieved successfully",
        data={"events": events}
    )

@router.get("/{event_id}")
async def get_attendance(
    event_id: str,
    api: DashboardAPI = Depends(get_api)
):
    """Attendance form for one event"""
    event = await api.get_event(event_id)
    control = attendance_control(event)

    return success_response(
        message="Attendance details retrieved",
        data={
            "event": event,
            "is_past": is_past(event),
            "can_mark": control.enabled,
            "attendance": control,
        }
    )

@router.post("/{event_id}")
async def mark_attendance(
    event_id: str,
    form: AttendanceCode,
    api: DashboardAPI = Depends(get_api),
    service: EventService = Depends(get_event_service)
):
    """Record the caller's attendance with the code given by the organizer"""
    event = await api.get_event(event_id)
    attended = await service.mark_attendance(event, form.code)

    return success_response(
        message="Your attendance has been successfully recorded",
        data={"event": attended, "attendance": attendance_control(attended)}
    )
