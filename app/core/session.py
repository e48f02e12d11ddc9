"""
Session context: the authenticated identity and the credential that proves it
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from app.core.access import Role, capabilities
from app.core.config import settings
from app.schemas.user import Identity
from app.utils.security import decode_credential, extract_token

logger = logging.getLogger(__name__)

def decode_identity(token: Optional[str]) -> Optional[Identity]:
    """Decode the identity carried by a credential, or None if it carries none"""
    claims = decode_credential(token)
    if claims is None:
        return None

    role = Role.parse(claims.get("role"))
    user_id = claims.get("id")
    if user_id is None:
        user_id = claims.get("sub")
    if role is None or user_id is None:
        return None

    try:
        return Identity(
            id=str(user_id),
            name=str(claims.get("name") or claims.get("email") or user_id),
            role=role,
        )
    except ValidationError:
        return None

@dataclass(frozen=True)
class SessionContext:
    """Per-request session state handed to every view"""
    token: Optional[str] = None
    identity: Optional[Identity] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def role(self) -> Optional[Role]:
        return self.identity.role if self.identity else None

    @property
    def capabilities(self):
        return capabilities(self.role)

    @classmethod
    def from_token(cls, token: Optional[str]) -> "SessionContext":
        """Build a session from a stored credential.

        A credential that does not decode yields an anonymous session, exactly
        as if no credential had been stored.
        """
        identity = decode_identity(token)
        if identity is None:
            return cls()
        return cls(token=token, identity=identity)

    @classmethod
    def from_request(cls, request) -> "SessionContext":
        return cls.from_token(extract_token(request))

def start_session(response, token: str) -> None:
    """Store the credential so later navigations can restore the session"""
    response.set_cookie(
        key=settings.TOKEN_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )

def end_session(response) -> None:
    """Clear the stored credential"""
    response.delete_cookie(key=settings.TOKEN_COOKIE_NAME)
