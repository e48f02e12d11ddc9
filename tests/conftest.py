"""
Shared fixtures: credentials, a fake upstream API and a test client wired to it
"""

import json
import re
from datetime import datetime, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.api.deps import get_http_client
from main import app

UPSTREAM_URL = "http://upstream.test"

def make_token(role="attendee", user_id="u-1", name="Test User", **claims) -> str:
    """Credential as the upstream API would issue it"""
    payload = {"id": user_id, "name": name, "role": role, **claims}
    return jwt.encode(payload, "upstream-secret", algorithm="HS256")

def auth_headers(role="attendee", user_id="u-1", name="Test User") -> dict:
    return {"Authorization": f"Bearer {make_token(role=role, user_id=user_id, name=name)}"}

def days_from_now(days: int) -> str:
    return (datetime.now() + timedelta(days=days)).date().isoformat()

def event_payload(event_id="e-1", **overrides) -> dict:
    payload = {
        "id": event_id,
        "title": "Conference A",
        "description": "Annual conference",
        "date": days_from_now(10),
        "time": "10:00",
        "location": "Main Hall",
        "type": "conference",
        "organizerId": "org-1",
        "capacity": 10,
        "attendeeCount": 3,
        "isRegistered": False,
        "hasAttended": False,
        "hasFeedback": False,
    }
    payload.update(overrides)
    return payload

def venue_payload(venue_id="v-1", **overrides) -> dict:
    payload = {
        "id": venue_id,
        "name": "Main Hall",
        "address": "1 Campus Road",
        "capacity": 200,
        "facilities": ["WiFi", "Projector"],
        "contactInfo": "hall@example.com",
        "description": "Large hall",
    }
    payload.update(overrides)
    return payload

class FakeUpstream:
    """In-memory stand-in for the upstream REST API"""

    def __init__(self):
        self.events = {}
        self.venues = {}
        self.feedback = {}
        self.profile = {
            "id": "u-1",
            "name": "Test User",
            "email": "test@example.com",
            "role": "attendee",
            "bio": "",
            "phone": "",
        }
        self.requests = []
        self.failures = {}

    def add_event(self, **overrides) -> dict:
        payload = event_payload(**overrides)
        self.events[payload["id"]] = payload
        return payload

    def add_venue(self, **overrides) -> dict:
        payload = venue_payload(**overrides)
        self.venues[payload["id"]] = payload
        return payload

    def fail(self, method, path, status_code=500, body=None):
        self.failures[(method, path)] = (status_code, body)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        if (method, path) in self.failures:
            status_code, body = self.failures[(method, path)]
            if body is None:
                return httpx.Response(status_code)
            return httpx.Response(status_code, json=body)

        body = json.loads(request.content) if request.content else None

        if path == "/api/event" and method == "GET":
            events = list(self.events.values())
            if request.url.params.get("registered") == "true":
                events = [e for e in events if e["isRegistered"]]
            if request.url.params.get("attended") == "true":
                events = [e for e in events if e["hasAttended"]]
            venue = request.url.params.get("venue")
            if venue is not None:
                events = [e for e in events if e.get("venueId") == venue]
            return httpx.Response(200, json=events)
        if path == "/api/event" and method == "POST":
            created = event_payload(event_id=f"e-{len(self.events) + 1}", **body)
            self.events[created["id"]] = created
            return httpx.Response(201, json=created)

        match = re.fullmatch(r"/api/event/([^/]+)(/register)?", path)
        if match:
            event = self.events.get(match.group(1))
            if event is None:
                return httpx.Response(404, json={"message": "Event not found"})
            if match.group(2):
                event["isRegistered"] = True
                event["attendeeCount"] += 1
                return httpx.Response(200, json={"message": "Registered"})
            if method == "DELETE":
                del self.events[event["id"]]
                return httpx.Response(204)
            if method == "POST":
                event.update(body)
            return httpx.Response(200, json=event)

        if path == "/api/venue" and method == "GET":
            return httpx.Response(200, json=list(self.venues.values()))
        if path == "/api/venue" and method == "POST":
            created = venue_payload(venue_id=f"v-{len(self.venues) + 1}", **body)
            self.venues[created["id"]] = created
            return httpx.Response(201, json=created)

        match = re.fullmatch(r"/api/venue/([^/]+)", path)
        if match:
            venue = self.venues.get(match.group(1))
            if venue is None:
                return httpx.Response(404, json={"message": "Venue not found"})
            if method == "DELETE":
                del self.venues[venue["id"]]
                return httpx.Response(204)
            if method == "POST":
                venue.update(body)
            return httpx.Response(200, json=venue)

        match = re.fullmatch(r"/api/attendance/([^/]+)", path)
        if match:
            event = self.events[match.group(1)]
            if body.get("code") != "OK-123":
                return httpx.Response(400, json={"message": "Invalid attendance code"})
            event["hasAttended"] = True
            return httpx.Response(200, json={"message": "Attendance recorded"})

        match = re.fullmatch(r"/api/feedback/([^/]+)", path)
        if match:
            event_id = match.group(1)
            if method == "GET":
                return httpx.Response(200, json=self.feedback.get(event_id, []))
            if event_id in self.feedback:
                return httpx.Response(409, json={"message": "Feedback already submitted"})
            stored = {
                "id": f"f-{event_id}",
                "eventId": event_id,
                "rating": body["rating"],
                "comment": body["comment"],
                "createdAt": datetime.now().isoformat(),
            }
            self.feedback[event_id] = [stored]
            self.events[event_id]["hasFeedback"] = True
            return httpx.Response(201, json=stored)

        if path == "/api/user/profile":
            if method == "PUT":
                self.profile.update(body)
            return httpx.Response(200, json=self.profile)
        if path == "/api/user/change-password":
            return httpx.Response(200, json={"message": "Password changed"})

        return httpx.Response(404, json={"message": "Not found"})

@pytest.fixture
def upstream():
    return FakeUpstream()

@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle), base_url=UPSTREAM_URL)

@pytest.fixture
def client(http_client):
    """Test client whose views talk to the fake upstream"""
    app.dependency_overrides[get_http_client] = lambda: http_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
