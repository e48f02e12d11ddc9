"""
Attendance and feedback Pydantic schemas
"""

from typing import Optional
from pydantic import Field, field_validator

from app.schemas.common import CamelModel, ResourceModel, blank_if_none

class AttendanceCode(CamelModel):
    """One-time attendance code handed out by the organizer"""
    code: str

class Feedback(ResourceModel):
    """Feedback left by an attendee"""
    event_id: Optional[str] = None
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("event_id", "user_id", mode="before")
    @classmethod
    def stringify_ids(cls, value):
        return str(value) if value is not None else value

    @field_validator("comment", mode="before")
    @classmethod
    def null_comment_is_blank(cls, value):
        return blank_if_none(value)

class FeedbackCreate(CamelModel):
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1)
