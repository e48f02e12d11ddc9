"""
Client for the upstream REST API.

Every call carries the session's bearer credential. Transport failures and
non-2xx replies are raised as APIError with the server's `message` when it
sent one, else the fallback for that call.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from app.core.errors import APIError
from app.schemas.event import Event, EventCreate
from app.schemas.feedback import Feedback, FeedbackCreate
from app.schemas.user import PasswordChange, ProfileUpdate, UserProfile
from app.schemas.venue import Venue, VenueCreate

logger = logging.getLogger(__name__)

_ENVELOPE_KEYS = {"success", "message", "data"}

def _segment(value: str) -> str:
    """Escape an id for use as one upstream path segment"""
    return quote(str(value), safe="")

def _server_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None

def _unwrap(payload: Any) -> Any:
    # Accept both bare payloads and {"data": ...} envelopes
    if isinstance(payload, dict) and "data" in payload and set(payload) <= _ENVELOPE_KEYS:
        return payload["data"]
    return payload

def _as_list(payload: Any) -> List[Any]:
    payload = _unwrap(payload)
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    return [payload]

def _parse(model, payload: Any, fallback: str):
    try:
        return model.model_validate(_unwrap(payload))
    except ValidationError as e:
        logger.error(f"Unexpected {model.__name__} payload from upstream: {e}")
        raise APIError(fallback) from e

def _parse_list(model, payload: Any, fallback: str) -> list:
    return [_parse(model, item, fallback) for item in _as_list(payload)]

class DashboardAPI:
    """Upstream API bound to one session's credential"""

    def __init__(self, http: httpx.AsyncClient, token: Optional[str]):
        self.http = http
        self.token = token

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def request(
        self,
        method: str,
        path: str,
        fallback: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty)"""
        try:
            response = await self.http.request(
                method, path, params=params, json=json, headers=self._headers()
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise APIError(fallback) from e

        if response.is_error:
            message = _server_message(response)
            logger.error(f"{method} {path} returned {response.status_code}: {message or fallback}")
            raise APIError(message or fallback, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {path} returned a non-JSON body")
            raise APIError(fallback, status_code=response.status_code) from e

    # -------- Events --------

    async def list_events(
        self,
        registered: bool = False,
        attended: bool = False,
        venue: Optional[str] = None,
    ) -> List[Event]:
        fallback = "Failed to load events. Please try again later."
        params = {}
        if registered:
            params["registered"] = "true"
        if attended:
            params["attended"] = "true"
        if venue is not None:
            params["venue"] = venue
        payload = await self.request("GET", "/api/event", fallback, params=params or None)
        return _parse_list(Event, payload, fallback)

    async def get_event(self, event_id: str) -> Event:
        fallback = "Failed to load event details. Please try again later."
        payload = await self.request("GET", f"/api/event/{_segment(event_id)}", fallback)
        return _parse(Event, payload, fallback)

    async def create_event(self, form: EventCreate) -> Event:
        fallback = "Failed to create event"
        payload = await self.request(
            "POST", "/api/event", fallback, json=form.model_dump(mode="json", by_alias=True)
        )
        return _parse(Event, payload, fallback)

    async def update_event(self, event_id: str, form: EventCreate) -> Event:
        fallback = "Failed to update event"
        payload = await self.request(
            "POST", f"/api/event/{_segment(event_id)}", fallback, json=form.model_dump(mode="json", by_alias=True)
        )
        return _parse(Event, payload, fallback)

    async def register_for_event(self, event_id: str) -> None:
        await self.request("POST", f"/api/event/{_segment(event_id)}/register", "Failed to register for event")

    async def delete_event(self, event_id: str) -> None:
        await self.request("DELETE", f"/api/event/{_segment(event_id)}", "Failed to delete event")

    # -------- Venues --------

    async def list_venues(self) -> List[Venue]:
        fallback = "Failed to load venues. Please try again later."
        payload = await self.request("GET", "/api/venue", fallback)
        return _parse_list(Venue, payload, fallback)

    async def get_venue(self, venue_id: str) -> Venue:
        fallback = "Failed to load venue details. Please try again later."
        payload = await self.request("GET", f"/api/venue/{_segment(venue_id)}", fallback)
        return _parse(Venue, payload, fallback)

    async def create_venue(self, form: VenueCreate) -> Venue:
        fallback = "Failed to create venue"
        payload = await self.request(
            "POST", "/api/venue", fallback, json=form.model_dump(mode="json", by_alias=True)
        )
        return _parse(Venue, payload, fallback)

    async def update_venue(self, venue_id: str, form: VenueCreate) -> Venue:
        fallback = "Failed to update venue"
        payload = await self.request(
            "POST", f"/api/venue/{_segment(venue_id)}", fallback, json=form.model_dump(mode="json", by_alias=True)
        )
        return _parse(Venue, payload, fallback)

    async def delete_venue(self, venue_id: str) -> None:
        await self.request("DELETE", f"/api/venue/{_segment(venue_id)}", "Failed to delete venue")

    # -------- Attendance & feedback --------

    async def mark_attendance(self, event_id: str, code: str) -> None:
        await self.request(
            "POST", f"/api/attendance/{_segment(event_id)}", "Failed to mark attendance", json={"code": code}
        )

    async def get_feedback(self, event_id: str) -> List[Feedback]:
        """Feedback visible to the caller for an event: their own, or all of it for staff"""
        fallback = "Failed to load feedback. Please try again later."
        payload = await self.request("GET", f"/api/feedback/{_segment(event_id)}", fallback)
        return _parse_list(Feedback, payload, fallback)

    async def submit_feedback(self, event_id: str, form: FeedbackCreate) -> Optional[Feedback]:
        fallback = "Failed to submit feedback"
        payload = await self.request(
            "POST", f"/api/feedback/{_segment(event_id)}", fallback, json=form.model_dump(mode="json", by_alias=True)
        )
        payload = _unwrap(payload)
        if not isinstance(payload, dict) or "id" not in payload:
            return None
        return _parse(Feedback, payload, fallback)

    # -------- Profile --------

    async def get_profile(self) -> UserProfile:
        fallback = "Failed to load profile data"
        payload = await self.request("GET", "/api/user/profile", fallback)
        return _parse(UserProfile, payload, fallback)

    async def update_profile(self, form: ProfileUpdate) -> UserProfile:
        fallback = "Failed to update profile"
        payload = await self.request(
            "PUT", "/api/user/profile", fallback, json=form.model_dump(mode="json", by_alias=True)
        )
        return _parse(UserProfile, payload, fallback)

    async def change_password(self, form: PasswordChange) -> None:
        await self.request(
            "POST", "/api/user/change-password", "Failed to change password",
            json={"currentPassword": form.current_password, "newPassword": form.new_password},
        )
