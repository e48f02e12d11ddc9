"""
Identity and profile Pydantic schemas
"""

from typing import Optional
from pydantic import BaseModel, field_validator

from app.core.access import Role
from app.schemas.common import CamelModel, ResourceModel, blank_if_none

class Identity(BaseModel):
    """Authenticated identity decoded from the session credential"""
    id: str
    name: str
    role: Role

    class Config:
        frozen = True

class UserProfile(ResourceModel):
    """Profile as stored by the upstream API"""
    name: str
    email: Optional[str] = None
    role: Role
    bio: str = ""
    phone: str = ""

    @field_validator("bio", "phone", mode="before")
    @classmethod
    def null_text_is_blank(cls, value):
        return blank_if_none(value)

class ProfileUpdate(CamelModel):
    name: str
    bio: str = ""
    phone: str = ""

class PasswordChange(CamelModel):
    current_password: str
    new_password: str
    confirm_password: str
