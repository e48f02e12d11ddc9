"""
Request dependencies shared by the dashboard views
"""

import httpx
from fastapi import Depends, Request

from app.core.access import Capability
from app.core.session import SessionContext
from app.schemas.user import Identity
from app.services.api_client import DashboardAPI
from app.services.event_service import EventService
from app.services.profile_service import ProfileService
from app.services.venue_service import VenueService
from app.utils.responses import forbidden_error, unauthorized_error

def get_session(request: Request) -> SessionContext:
    """Session established by the routing gate for this request"""
    session = getattr(request.state, "session", None)
    if session is None:
        session = SessionContext.from_request(request)
    return session

def get_identity(session: SessionContext = Depends(get_session)) -> Identity:
    if session.identity is None:
        unauthorized_error("Please sign in to continue")
    return session.identity

def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client

def get_api(
    session: SessionContext = Depends(get_session),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> DashboardAPI:
    return DashboardAPI(http, session.token)

def get_event_service(
    api: DashboardAPI = Depends(get_api),
    identity: Identity = Depends(get_identity),
) -> EventService:
    return EventService(api, identity)

def get_venue_service(
    api: DashboardAPI = Depends(get_api),
    identity: Identity = Depends(get_identity),
) -> VenueService:
    return VenueService(api, identity)

def get_profile_service(
    api: DashboardAPI = Depends(get_api),
    identity: Identity = Depends(get_identity),
) -> ProfileService:
    return ProfileService(api, identity)

def require_capability(capability: Capability):
    """Dependency refusing callers whose role lacks capability"""
    def checker(session: SessionContext = Depends(get_session)) -> SessionContext:
        if capability not in session.capabilities:
            forbidden_error("You do not have permission to perform this action")
        return session
    return checker
