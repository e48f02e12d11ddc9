"""
Common Pydantic schemas
"""

from typing import Any, Optional
from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

class StandardResponse(BaseModel):
    """Standard API response"""
    success: bool
    message: str
    data: Optional[Any] = None

class ErrorResponse(BaseModel):
    """Error response schema"""
    success: bool = False
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None

class CamelModel(BaseModel):
    """Base for resources exchanged with the upstream API in camelCase"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class ResourceModel(CamelModel):
    """Upstream resource with an identifier"""
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value):
        # Upstream ids may be numeric or string
        return str(value) if value is not None else value

def blank_if_none(value):
    """Upstream sends null for text it has no value for"""
    return "" if value is None else value

class ControlState(BaseModel):
    """Enabled state and label of a role-gated control"""
    enabled: bool
    label: str
