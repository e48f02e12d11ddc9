"""
Venue-related Pydantic schemas
"""

from typing import List, Optional
from pydantic import Field, field_validator

from app.schemas.common import CamelModel, ResourceModel, blank_if_none

def unique_facilities(values) -> List[str]:
    """Trim facility names and drop blanks and repeats, keeping first-seen order"""
    seen = []
    for value in values or []:
        name = str(value).strip()
        if name and name not in seen:
            seen.append(name)
    return seen

class Venue(ResourceModel):
    """Venue as returned by the upstream API"""
    name: str
    address: str = ""
    capacity: Optional[int] = None
    facilities: List[str] = []
    contact_info: str = ""
    description: str = ""

    @field_validator("facilities", mode="before")
    @classmethod
    def normalise_facilities(cls, value):
        return unique_facilities(value)

    @field_validator("address", "contact_info", "description", mode="before")
    @classmethod
    def null_text_is_blank(cls, value):
        return blank_if_none(value)

class VenueCreate(CamelModel):
    """Schema for creating or editing a venue"""
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    description: str = Field(min_length=1)
    capacity: int = Field(ge=1)
    contact_info: str = Field(min_length=1)
    facilities: List[str] = []

    @field_validator("facilities", mode="before")
    @classmethod
    def normalise_facilities(cls, value):
        return unique_facilities(value)
