"""
Routing gate applied to every navigation
"""

import logging
from enum import Enum
from typing import Optional
from urllib.parse import quote

from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.access import can_access, is_public
from app.core.session import SessionContext
from app.utils.security import extract_token

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"

# Served without consulting the gate
UNGATED_PREFIXES = ("/static/", "/favicon.ico")

class GateDecision(str, Enum):
    PUBLIC = "public"
    UNAUTHENTICATED = "unauthenticated"
    ALLOWED = "allowed"
    DENIED = "denied"

def decide(path: str, token: Optional[str]) -> GateDecision:
    """Decide what happens to a navigation to path with the given credential"""
    if is_public(path):
        return GateDecision.PUBLIC

    session = SessionContext.from_token(token)
    if not session.is_authenticated:
        return GateDecision.UNAUTHENTICATED

    if can_access(path, session.role):
        return GateDecision.ALLOWED
    return GateDecision.DENIED

def login_redirect_url(path: str) -> str:
    return f"{LOGIN_PATH}?next={quote(path, safe='/')}"

class RoutingGateMiddleware(BaseHTTPMiddleware):
    """Redirects navigations the session may not make"""

    async def dispatch(self, request, call_next):
        path = request.url.path
        if path.startswith(UNGATED_PREFIXES):
            return await call_next(request)

        token = extract_token(request)
        decision = decide(path, token)

        if decision is GateDecision.UNAUTHENTICATED:
            logger.info(f"Unauthenticated navigation to {path}, redirecting to login")
            return RedirectResponse(url=login_redirect_url(path), status_code=303)

        if decision is GateDecision.DENIED:
            logger.info(f"Role not admitted to {path}, redirecting to {UNAUTHORIZED_PATH}")
            return RedirectResponse(url=UNAUTHORIZED_PATH, status_code=303)

        request.state.session = SessionContext.from_token(token)
        return await call_next(request)
