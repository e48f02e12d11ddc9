"""
Profile actions
"""

import logging

from app.core.errors import ValidationFailure
from app.schemas.user import Identity, PasswordChange, ProfileUpdate, UserProfile
from app.services.actions import InFlightGuard, submission_guard
from app.services.api_client import DashboardAPI

logger = logging.getLogger(__name__)

class ProfileService:
    def __init__(self, api: DashboardAPI, identity: Identity, guard: InFlightGuard = submission_guard):
        self.api = api
        self.identity = identity
        self.guard = guard

    async def update_profile(self, form: ProfileUpdate) -> UserProfile:
        if not form.name.strip():
            raise ValidationFailure("Name is required")
        with self.guard.claim(self.api.token, "update-profile", self.identity.id):
            profile = await self.api.update_profile(form)
        logger.info(f"Profile of {self.identity.id} updated")
        return profile

    async def change_password(self, form: PasswordChange) -> None:
        # Checked before anything is sent
        if form.new_password != form.confirm_password:
            raise ValidationFailure("New passwords do not match")
        if not form.new_password:
            raise ValidationFailure("New password is required")
        with self.guard.claim(self.api.token, "change-password", self.identity.id):
            await self.api.change_password(form)
        logger.info(f"Password of {self.identity.id} changed")
