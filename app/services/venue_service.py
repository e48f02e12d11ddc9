"""
Venue actions: create, edit and delete
"""

import logging

from app.schemas.user import Identity
from app.schemas.venue import Venue, VenueCreate
from app.services.actions import InFlightGuard, submission_guard
from app.services.api_client import DashboardAPI

logger = logging.getLogger(__name__)

class VenueService:
    """Service for venue mutations made on behalf of one session"""

    def __init__(self, api: DashboardAPI, identity: Identity, guard: InFlightGuard = submission_guard):
        self.api = api
        self.identity = identity
        self.guard = guard

    async def create(self, form: VenueCreate) -> Venue:
        with self.guard.claim(self.api.token, "create-venue", form.name):
            venue = await self.api.create_venue(form)
        logger.info(f"Venue {venue.id} created by {self.identity.id}")
        return venue

    async def update(self, venue: Venue, form: VenueCreate) -> Venue:
        with self.guard.claim(self.api.token, "edit-venue", venue.id):
            updated = await self.api.update_venue(venue.id, form)
        logger.info(f"Venue {venue.id} updated by {self.identity.id}")
        return updated

    async def delete(self, venue: Venue) -> None:
        with self.guard.claim(self.api.token, "delete-venue", venue.id):
            await self.api.delete_venue(venue.id)
        logger.info(f"Venue {venue.id} deleted by {self.identity.id}")
