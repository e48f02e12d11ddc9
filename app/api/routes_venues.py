"""
Venue pages
"""

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_api, get_identity, get_venue_service, require_capability
from app.core.access import Capability, has_capability
from app.core.errors import APIError
from app.schemas.user import Identity
from app.schemas.venue import VenueCreate
from app.services.api_client import DashboardAPI
from app.services.filtering import (
    VENUE_SEARCH_FIELDS,
    DateBucket,
    FilterSpec,
    filter_items,
    sort_by_instant,
)
from app.services.venue_service import VenueService
from app.utils.responses import success_response

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("")
async def list_venues(
    q: str = "",
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """List venues matching the search text"""
    venues = await api.list_venues()
    visible = filter_items(venues, FilterSpec(query=q, text_fields=VENUE_SEARCH_FIELDS))

    return success_response(
        message="Venues retrieved successfully",
        data={
            "venues": visible,
            "total": len(venues),
            "can_create": has_capability(identity.role, Capability.CREATE_VENUE),
        }
    )

@router.get("/create")
async def create_venue_form(
    session=Depends(require_capability(Capability.CREATE_VENUE))
):
    return success_response(message="Venue form", data={"facilities": []})

@router.post("/create")
async def create_venue(
    form: VenueCreate,
    session=Depends(require_capability(Capability.CREATE_VENUE)),
    service: VenueService = Depends(get_venue_service)
):
    """Create a new venue"""
    venue = await service.create(form)
    return success_response(
        message="Your venue has been created successfully",
        data={"venue": venue, "redirect": f"/venues/{venue.id}"},
        status_code=201
    )

@router.get("/edit/{venue_id}")
async def edit_venue_form(
    venue_id: str,
    session=Depends(require_capability(Capability.EDIT_VENUE)),
    api: DashboardAPI = Depends(get_api)
):
    venue = await api.get_venue(venue_id)
    return success_response(message="Venue form", data={"venue": venue})

@router.post("/edit/{venue_id}")
async def edit_venue(
    venue_id: str,
    form: VenueCreate,
    session=Depends(require_capability(Capability.EDIT_VENUE)),
    api: DashboardAPI = Depends(get_api),
    service: VenueService = Depends(get_venue_service)
):
    """Save changes to a venue"""
    venue = await api.get_venue(venue_id)
    updated = await service.update(venue, form)
    return success_response(
        message="The venue has been updated successfully",
        data={"venue": updated, "redirect": f"/venues/{updated.id}"}
    )

@router.get("/{venue_id}")
async def get_venue_details(
    venue_id: str,
    identity: Identity = Depends(get_identity),
    api: DashboardAPI = Depends(get_api)
):
    """Venue details with its upcoming events"""
    venue = await api.get_venue(venue_id)

    # The venue is still shown when its events cannot be loaded
    try:
        events = await api.list_events(venue=venue.id)
    except APIError as e:
        logger.warning(f"Could not load events for venue {venue.id}: {e.message}")
        events = []
    upcoming = sort_by_instant(filter_items(events, FilterSpec(date_bucket=DateBucket.UPCOMING)))

    can_edit = has_capability(identity.role, Capability.EDIT_VENUE)
    return success_response(
        message="Venue details retrieved",
        data={
            "venue": venue,
            "upcoming_events": upcoming,
            "can_edit": can_edit,
            "can_delete": has_capability(identity.role, Capability.DELETE_VENUE),
        }
    )

@router.delete("/{venue_id}")
async def delete_venue(
    venue_id: str,
    session=Depends(require_capability(Capability.DELETE_VENUE)),
    api: DashboardAPI = Depends(get_api),
    service: VenueService = Depends(get_venue_service)
):
    """Delete a venue"""
    venue = await api.get_venue(venue_id)
    await service.delete(venue)
    return success_response(
        message="The venue has been successfully deleted",
        data={"deleted_venue_id": venue.id, "redirect": "/venues"}
    )
