"""
Profile pages
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_api, get_profile_service
from app.schemas.user import PasswordChange, ProfileUpdate
from app.services.api_client import DashboardAPI
from app.services.profile_service import ProfileService
from app.utils.responses import success_response

router = APIRouter()

@router.get("")
async def get_profile(api: DashboardAPI = Depends(get_api)):
    """The caller's profile"""
    profile = await api.get_profile()
    return success_response(message="Profile retrieved", data={"profile": profile})

@router.put("")
async def update_profile(
    form: ProfileUpdate,
    service: ProfileService = Depends(get_profile_service)
):
    """Update name, bio and phone"""
    profile = await service.update_profile(form)
    return success_response(
        message="Your profile has been updated successfully",
        data={"profile": profile}
    )

@router.post("/change-password")
async def change_password(
    form: PasswordChange,
    service: ProfileService = Depends(get_profile_service)
):
    """Change the caller's password"""
    await service.change_password(form)
    return success_response(message="Your password has been changed successfully")
