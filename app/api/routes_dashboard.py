"""
Dashboard home page
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_api, get_identity
from app.core.access import can_access, capabilities
from app.core.config import settings
from app.schemas.user import Identity
from app.services.api_client import DashboardAPI
from app.services.filtering import DateBucket, FilterSpec, filter_items, sort_by_instant
from app.utils.responses import success_response

router = APIRouter()

NAVIGATION = [
    ("Dashboard", "/dashboard"),
    ("Events", "/events"),
    ("Venues", "/venues"),
    ("Attendance", "/attendance"),
    ("Feedback", "/feedback"),
    ("Profile", "/profile"),
    ("Admin Panel", "/admin"),
]

def navigation_for(identity: Identity) -> list:
    """Navigation entries the identity is allowed to follow"""
    return [
        {"name": name, "href": href}
        for name, href in NAVIGATION
        if can_access(href, identity.role)
    ]

@router.get("/dashboard")
async def dashboard(
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Overview of the caller's upcoming events and participation"""
    events = await api.list_events()
    upcoming = sort_by_instant(filter_items(events, FilterSpec(date_bucket=DateBucket.UPCOMING)))

    return success_response(
        message="Dashboard retrieved",
        data={
            "user": identity,
            "capabilities": sorted(capability.value for capability in capabilities(identity.role)),
            "navigation": navigation_for(identity),
            "upcoming_events": upcoming[:settings.UPCOMING_EVENTS_LIMIT],
            "stats": {
                "total_events": len(events),
                "upcoming_events": len(upcoming),
                "registered": sum(1 for event in events if event.is_registered),
                "attended": sum(1 for event in events if event.has_attended),
                "awaiting_feedback": sum(
                    1 for event in events if event.has_attended and not event.has_feedback
                ),
            },
        }
    )
