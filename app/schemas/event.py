"""
Event-related Pydantic schemas
"""

import datetime as dt
from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator

from app.schemas.common import CamelModel, ResourceModel, blank_if_none

EVENT_TYPES = ("conference", "workshop", "seminar", "networking", "social", "other")

EventType = Literal["conference", "workshop", "seminar", "networking", "social", "other"]

class Event(ResourceModel):
    """Event as returned by the upstream API, with the caller's participation flags"""
    title: str
    description: str = ""
    date: str
    time: str = ""
    location: str = ""
    type: str = ""
    organizer_id: Optional[str] = None
    organizer_name: Optional[str] = None
    capacity: Optional[int] = None
    attendee_count: int = 0
    is_registered: bool = False
    has_attended: bool = False
    has_feedback: bool = False

    @model_validator(mode="before")
    @classmethod
    def accept_nested_organizer(cls, data):
        """Accept `organizer: {id, name}`, `attendees` and `isAttended` payloads"""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        organizer = data.pop("organizer", None)
        if isinstance(organizer, dict):
            data.setdefault("organizerId", organizer.get("id"))
            data.setdefault("organizerName", organizer.get("name"))
        elif isinstance(organizer, str):
            data.setdefault("organizerName", organizer)
        if "attendees" in data:
            attendees = data.pop("attendees")
            if isinstance(attendees, list):
                attendees = len(attendees)
            data.setdefault("attendeeCount", attendees)
        if "isAttended" in data:
            data.setdefault("hasAttended", data.pop("isAttended"))
        return data

    @field_validator("description", "time", "location", "type", mode="before")
    @classmethod
    def null_text_is_blank(cls, value):
        return blank_if_none(value)

    @field_validator("organizer_id", mode="before")
    @classmethod
    def stringify_organizer_id(cls, value):
        return str(value) if value is not None else value

    @property
    def is_full(self) -> bool:
        return self.capacity is not None and self.attendee_count >= self.capacity

class EventCreate(CamelModel):
    """Schema for creating or editing an event"""
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    date: dt.date
    time: str = Field(min_length=1)
    location: str = Field(min_length=1)
    type: EventType
    capacity: int = Field(ge=1)
