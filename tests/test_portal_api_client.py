"""
Tests for the HTTP adapter against a mocked transport.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest

from booking_scheduler.application.exceptions import (
    AvailabilityError,
    BookingConflictError,
    BookingFailedError,
    BookingNotFoundError,
    IdentityCreationError,
)
from booking_scheduler.domain.entities.contact import ContactDetails
from booking_scheduler.domain.entities.slot import Slot
from booking_scheduler.infrastructure.portal.portal_api_client import PortalApiClient, format_instant

START = datetime(2025, 1, 6, 5, 0, tzinfo=timezone.utc)


def _client(handler) -> PortalApiClient:
    transport = httpx.MockTransport(handler)
    return PortalApiClient(client=httpx.AsyncClient(base_url="http://portal.test", transport=transport))


def test_format_instant_uses_z_suffix():
    assert format_instant(START) == "2025-01-06T05:00:00.000Z"


def test_suggest_slots_sends_window_and_parses_slots():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "slots": [
                    {"startAt": "2025-01-06T14:00:00.000Z", "endAt": "2025-01-06T14:30:00.000Z", "closerCount": 2},
                    {"startAt": "not a time", "endAt": "2025-01-06T15:30:00.000Z", "closerCount": 1},
                    "garbage",
                ]
            },
        )

    slots = asyncio.run(_client(handler).suggest_slots(START, days=7, duration_minutes=30, limit=50))

    assert slots == [
        Slot(
            start_at=datetime(2025, 1, 6, 14, 0, tzinfo=timezone.utc),
            end_at=datetime(2025, 1, 6, 14, 30, tzinfo=timezone.utc),
            capacity=2,
        )
    ]
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/api/public/appointments/suggestions"
    assert request.url.params["startAt"] == "2025-01-06T05:00:00.000Z"
    assert request.url.params["days"] == "7"
    assert request.url.params["durationMinutes"] == "30"
    assert request.url.params["limit"] == "50"


def test_suggest_slots_server_error_uses_server_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Invalid query"})

    with pytest.raises(AvailabilityError) as exc:
        asyncio.run(_client(handler).suggest_slots(START, 7, 30, 50))
    assert exc.value.message == "Invalid query"


def test_suggest_slots_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AvailabilityError) as exc:
        asyncio.run(_client(handler).suggest_slots(START, 7, 30, 50))
    assert exc.value.message == "Unable to load availability."


def test_suggest_slots_non_json_error_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>")

    with pytest.raises(AvailabilityError) as exc:
        asyncio.run(_client(handler).suggest_slots(START, 7, 30, 50))
    assert exc.value.message == "Unable to load availability."


def test_create_identity_payload():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"requestId": "req_1", "leadId": "lead_1"})

    contact = ContactDetails(name="Ada", company="Engines", email="ada@example.com", phone="+15551234567")
    identity = asyncio.run(_client(handler).create_identity(contact))

    assert identity.request_id == "req_1"
    assert identity.lead_id == "lead_1"
    assert bodies == [
        {"name": "Ada", "company": "Engines", "email": "ada@example.com", "phone": "+15551234567", "optedIn": True}
    ]


def test_create_identity_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Please enter a valid email."})

    with pytest.raises(IdentityCreationError) as exc:
        asyncio.run(_client(handler).create_identity(ContactDetails(name="A", company="B", email="x", phone="+1")))
    assert exc.value.message == "Please enter a valid email."


def test_create_identity_without_request_id():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    with pytest.raises(IdentityCreationError):
        asyncio.run(_client(handler).create_identity(ContactDetails(name="A", company="B", email="x", phone="+1")))


def test_commit_payload_and_appointment():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={"appointment": {"id": "appt_1", "startAt": "2025-01-06T14:00:00.000Z", "endAt": "2025-01-06T14:30:00.000Z"}},
        )

    start = datetime(2025, 1, 6, 14, 0, tzinfo=timezone.utc)
    appointment = asyncio.run(_client(handler).commit("req_1", start, 30, "America/New_York"))

    assert appointment.appointment_id == "appt_1"
    assert appointment.start_at == start
    assert bodies == [
        {
            "requestId": "req_1",
            "startAt": "2025-01-06T14:00:00.000Z",
            "durationMinutes": 30,
            "timeZone": "America/New_York",
        }
    ]


@pytest.mark.parametrize(
    ("status", "error_type"),
    [(404, BookingNotFoundError), (409, BookingConflictError), (400, BookingFailedError), (500, BookingFailedError)],
)
def test_commit_status_mapping(status, error_type):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": "Server says no."})

    with pytest.raises(error_type) as exc:
        asyncio.run(_client(handler).commit("req_1", START, 30))
    assert exc.value.status_code == status


def test_commit_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(BookingFailedError) as exc:
        asyncio.run(_client(handler).commit("req_1", START, 30))
    assert exc.value.message == "We could not book that time. Please try again."
