"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .venue import *
from .feedback import *
from .user import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "ControlState",
    "Event",
    "EventCreate",
    "EVENT_TYPES",
    "Venue",
    "VenueCreate",
    "AttendanceCode",
    "Feedback",
    "FeedbackCreate",
    "Identity",
    "UserProfile",
    "ProfileUpdate",
    "PasswordChange",
]
