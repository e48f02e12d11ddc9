"""
Tests for control states, action preconditions and optimistic patches
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from conftest import days_from_now, event_payload

from app.core.access import Role
from app.core.errors import APIError, DuplicateSubmission, ValidationFailure
from app.schemas.event import Event
from app.schemas.feedback import FeedbackCreate
from app.schemas.user import Identity, PasswordChange
from app.services.actions import (
    CAPACITY_LABEL,
    InFlightGuard,
    apply_patch,
    attendance_control,
    feedback_control,
    registration_control,
)
from app.services.api_client import DashboardAPI
from app.services.event_service import EventService, can_modify_event, managed_events
from app.services.profile_service import ProfileService

ATTENDEE = Identity(id="u-1", name="Ada", role=Role.ATTENDEE)

def make_event(**overrides) -> Event:
    return Event.model_validate(event_payload(**overrides))

@pytest.fixture
def service(upstream, http_client):
    api = DashboardAPI(http_client, "token-1")
    return EventService(api, ATTENDEE, guard=InFlightGuard())

# -------- Control states --------

def test_full_past_event_shows_capacity_label():
    event = make_event(date=days_from_now(-1), capacity=10, attendeeCount=10, isRegistered=False)
    control = registration_control(event)
    assert not control.enabled
    assert "event has reached capacity" in control.label

def test_registration_control_states():
    assert registration_control(make_event()).enabled
    assert registration_control(make_event(isRegistered=True)).label == "You are registered for this event"
    past = registration_control(make_event(date=days_from_now(-3)))
    assert not past.enabled
    assert past.label == "This event has already taken place"

def test_unlimited_capacity_never_fills():
    event = make_event(capacity=None, attendeeCount=5000)
    assert not event.is_full
    assert registration_control(event).enabled

def test_attendance_control_states():
    assert attendance_control(make_event()).label == "Not Started Yet"
    assert attendance_control(make_event(date=days_from_now(-1))).enabled
    assert attendance_control(make_event(hasAttended=True)).label == "View Attendance"

def test_feedback_control_states():
    assert feedback_control(make_event()).label == "Not Started Yet"
    assert feedback_control(make_event(date=days_from_now(-1))).label == "Attendance Required"
    assert feedback_control(make_event(date=days_from_now(-1), hasAttended=True)).enabled
    assert feedback_control(make_event(hasFeedback=True)).label == "View Feedback"

# -------- Patches and guard --------

def test_apply_patch_leaves_original_untouched():
    event = make_event(attendeeCount=3)
    patched = apply_patch(event, {"is_registered": True, "attendee_count": 4})
    assert patched.is_registered and patched.attendee_count == 4
    assert not event.is_registered and event.attendee_count == 3

def test_guard_rejects_nested_claim_and_releases():
    guard = InFlightGuard()
    with guard.claim("t", "register", "e-1"):
        assert guard.is_pending("t", "register", "e-1")
        with pytest.raises(DuplicateSubmission):
            with guard.claim("t", "register", "e-1"):
                pass
        # Other entities are independent
        with guard.claim("t", "register", "e-2"):
            pass
    assert not guard.is_pending("t", "register", "e-1")

def test_guard_releases_after_failure():
    guard = InFlightGuard()
    with pytest.raises(RuntimeError):
        with guard.claim("k"):
            raise RuntimeError("boom")
    assert not guard.is_pending("k")

# -------- Event service --------

def test_register_patches_event(service, upstream):
    upstream.add_event(event_id="e-1", attendeeCount=3)
    event = make_event(event_id="e-1", attendeeCount=3)

    patched = asyncio.run(service.register(event))

    assert patched.is_registered
    assert patched.attendee_count == 4
    assert len(upstream.calls("POST", "/api/event/e-1/register")) == 1
    assert upstream.calls("POST", "/api/event/e-1/register")[0].headers["Authorization"] == "Bearer token-1"

def test_register_refused_when_full_sends_nothing(service, upstream):
    event = make_event(capacity=10, attendeeCount=10)
    with pytest.raises(ValidationFailure) as exc_info:
        asyncio.run(service.register(event))
    assert exc_info.value.message == CAPACITY_LABEL
    assert upstream.requests == []

def test_register_refused_when_already_registered(service, upstream):
    with pytest.raises(ValidationFailure):
        asyncio.run(service.register(make_event(isRegistered=True)))
    assert upstream.requests == []

def test_failed_register_leaves_event_unchanged(service, upstream):
    upstream.fail("POST", "/api/event/e-1/register", 400, {"message": "Registration closed"})
    event = make_event(event_id="e-1")

    with pytest.raises(APIError) as exc_info:
        asyncio.run(service.register(event))

    assert exc_info.value.message == "Registration closed"
    assert exc_info.value.status_code == 400
    assert not event.is_registered
    assert event.attendee_count == 3

def test_mark_attendance(service, upstream):
    upstream.add_event(event_id="e-1", date=days_from_now(-1))
    event = make_event(event_id="e-1", date=days_from_now(-1))

    patched = asyncio.run(service.mark_attendance(event, " OK-123 "))

    assert patched.has_attended
    assert not event.has_attended

def test_mark_attendance_requires_code(service, upstream):
    with pytest.raises(ValidationFailure) as exc_info:
        asyncio.run(service.mark_attendance(make_event(date=days_from_now(-1)), "  "))
    assert exc_info.value.message == "Attendance code is required"
    assert upstream.requests == []

def test_mark_attendance_before_start_is_refused(service, upstream):
    with pytest.raises(ValidationFailure):
        asyncio.run(service.mark_attendance(make_event(), "OK-123"))
    assert upstream.requests == []

def test_wrong_attendance_code_surfaces_server_message(service, upstream):
    upstream.add_event(event_id="e-1", date=days_from_now(-1))
    event = make_event(event_id="e-1", date=days_from_now(-1))
    with pytest.raises(APIError) as exc_info:
        asyncio.run(service.mark_attendance(event, "WRONG"))
    assert exc_info.value.message == "Invalid attendance code"

def test_feedback_for_future_event_is_refused(service, upstream):
    form = FeedbackCreate(rating=5, comment="Great")
    with pytest.raises(ValidationFailure):
        asyncio.run(service.submit_feedback(make_event(hasAttended=True), form))
    assert upstream.requests == []

def test_feedback_is_accepted_exactly_once(service, upstream):
    upstream.add_event(event_id="e-1", date=days_from_now(-1), hasAttended=True)
    event = make_event(event_id="e-1", date=days_from_now(-1), hasAttended=True)
    form = FeedbackCreate(rating=4, comment="Useful")

    patched, feedback = asyncio.run(service.submit_feedback(event, form))
    assert patched.has_feedback
    assert feedback.rating == 4

    # The patched entity refuses locally
    with pytest.raises(ValidationFailure):
        asyncio.run(service.submit_feedback(patched, form))

    # A stale copy is refused by the server
    with pytest.raises(APIError) as exc_info:
        asyncio.run(service.submit_feedback(event, form))
    assert exc_info.value.status_code == 409
    assert len(upstream.calls("POST", "/api/feedback/e-1")) == 2

def test_in_flight_submission_is_rejected(upstream, http_client):
    guard = InFlightGuard()
    service = EventService(DashboardAPI(http_client, "token-1"), ATTENDEE, guard=guard)
    event = make_event(event_id="e-1")

    with guard.claim("token-1", "register", "e-1"):
        with pytest.raises(DuplicateSubmission):
            asyncio.run(service.register(event))
    assert upstream.requests == []

# -------- Ownership --------

def test_can_modify_event():
    event = make_event(organizerId="org-1")
    organizer = Identity(id="org-1", name="Olive", role=Role.ORGANIZER)
    other = Identity(id="org-2", name="Otto", role=Role.ORGANIZER)
    manager = Identity(id="m-1", name="Mia", role=Role.MANAGER)
    assert can_modify_event(organizer, event)
    assert not can_modify_event(other, event)
    assert can_modify_event(manager, event)
    assert not can_modify_event(ATTENDEE, event)

def test_managed_events():
    organizer = Identity(id="org-1", name="Olive", role=Role.ORGANIZER)
    mine = make_event(event_id="e-1", organizerId="org-1")
    theirs = make_event(event_id="e-2", organizerId="org-2")
    assert managed_events(organizer, [mine, theirs]) == [mine]
    assert managed_events(ATTENDEE, [mine, theirs]) == []

# -------- Profile --------

def test_password_mismatch_sends_nothing(upstream, http_client):
    service = ProfileService(DashboardAPI(http_client, "token-1"), ATTENDEE, guard=InFlightGuard())
    form = PasswordChange(current_password="old", new_password="new-1", confirm_password="new-2")
    with pytest.raises(ValidationFailure) as exc_info:
        asyncio.run(service.change_password(form))
    assert exc_info.value.message == "New passwords do not match"
    assert upstream.requests == []

def test_password_change_sends_current_and_new(upstream, http_client):
    service = ProfileService(DashboardAPI(http_client, "token-1"), ATTENDEE, guard=InFlightGuard())
    form = PasswordChange(current_password="old", new_password="new-1", confirm_password="new-1")
    asyncio.run(service.change_password(form))
    [call] = upstream.calls("POST", "/api/user/change-password")
    assert b"currentPassword" in call.content
    assert b"confirm" not in call.content
