"""
Failures surfaced to the caller
"""

from typing import Optional

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."

class DashboardError(Exception):
    """Base class for failures shown to the user as a message"""

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message or GENERIC_ERROR_MESSAGE

class ValidationFailure(DashboardError):
    """A local precondition failed; no request was sent"""

class DuplicateSubmission(ValidationFailure):
    """The same action is already in flight for this entity"""

class APIError(DashboardError):
    """The upstream API could not be reached or answered with an error"""

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
