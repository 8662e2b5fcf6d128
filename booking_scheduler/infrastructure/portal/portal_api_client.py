from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from booking_scheduler.application.exceptions import (
    AvailabilityError,
    BookingConflictError,
    BookingFailedError,
    BookingNotFoundError,
    IdentityCreationError,
)
from booking_scheduler.application.ports.availability import AvailabilityPort
from booking_scheduler.application.ports.booking import BookingPort
from booking_scheduler.core.config import settings
from booking_scheduler.domain.entities.contact import ContactDetails, IdentityCreated
from booking_scheduler.domain.entities.slot import Appointment, Slot


def parse_instant(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_instant(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    utc = value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(data: Any) -> str | None:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, str) and error.strip():
            return error.strip()
    return None


class PortalApiClient(AvailabilityPort, BookingPort):
    """
    Adapter for the portal's suggestion, booking and demo-request endpoints.

    Contract guarantees:
    - suggest_slots raises AvailabilityError on any failure
    - create_identity raises IdentityCreationError on any failure
    - commit raises BookingNotFoundError (404), BookingConflictError (409)
      or BookingFailedError (anything else)
    - no httpx exception escapes
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.PORTAL_BASE_URL).rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or settings.PORTAL_TIMEOUT_SECONDS,
        )
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def suggest_slots(
        self,
        start_at: datetime,
        days: int,
        duration_minutes: int,
        limit: int,
    ) -> list[Slot]:
        params = {
            "startAt": format_instant(start_at),
            "days": str(days),
            "durationMinutes": str(duration_minutes),
            "limit": str(limit),
        }
        try:
            response = await self._client.get(
                settings.PORTAL_SUGGESTIONS_PATH,
                params=params,
                headers={"Cache-Control": "no-store"},
            )
        except httpx.HTTPError as e:
            self._logger.error("Suggestion request failed", extra={"error": str(e)})
            raise AvailabilityError() from e

        data = _json_or_none(response)
        if response.status_code >= 400:
            self._logger.warning("Suggestion request rejected", extra={"status": response.status_code})
            raise AvailabilityError(_error_message(data))

        raw_slots = data.get("slots") if isinstance(data, dict) else None
        if not isinstance(raw_slots, list):
            return []

        slots: list[Slot] = []
        for item in raw_slots:
            if not isinstance(item, dict):
                continue
            start = parse_instant(item.get("startAt"))
            end = parse_instant(item.get("endAt"))
            if start is None or end is None:
                continue
            try:
                capacity = max(int(item.get("closerCount") or 0), 0)
            except (TypeError, ValueError):
                capacity = 0
            slots.append(Slot(start_at=start, end_at=end, capacity=capacity))
        return slots

    async def create_identity(self, contact: ContactDetails, opted_in: bool = True) -> IdentityCreated:
        payload: dict[str, Any] = {
            "name": contact.name,
            "company": contact.company,
            "email": contact.email,
            "phone": contact.phone,
            "optedIn": opted_in,
        }
        if contact.goals:
            payload["goals"] = contact.goals

        try:
            response = await self._client.post(settings.PORTAL_DEMO_REQUEST_PATH, json=payload)
        except httpx.HTTPError as e:
            self._logger.error("Demo request failed", extra={"error": str(e)})
            raise IdentityCreationError() from e

        data = _json_or_none(response)
        if response.status_code >= 400:
            self._logger.warning("Demo request rejected", extra={"status": response.status_code})
            raise IdentityCreationError(_error_message(data))

        request_id = data.get("requestId") if isinstance(data, dict) else None
        if not isinstance(request_id, str) or not request_id:
            self._logger.error("Demo request returned no requestId")
            raise IdentityCreationError()

        lead_id = data.get("leadId")
        return IdentityCreated(request_id=request_id, lead_id=lead_id if isinstance(lead_id, str) else None)

    async def commit(
        self,
        request_id: str,
        start_at: datetime,
        duration_minutes: int,
        time_zone: str | None = None,
    ) -> Appointment:
        payload: dict[str, Any] = {
            "requestId": request_id,
            "startAt": format_instant(start_at),
            "durationMinutes": duration_minutes,
        }
        if time_zone:
            payload["timeZone"] = time_zone

        try:
            response = await self._client.post(settings.PORTAL_BOOK_PATH, json=payload)
        except httpx.HTTPError as e:
            self._logger.error("Booking request failed", extra={"request_id": request_id, "error": str(e)})
            raise BookingFailedError() from e

        data = _json_or_none(response)
        status = response.status_code
        if status == 404:
            raise BookingNotFoundError(status_code=status)
        if status == 409:
            raise BookingConflictError(status_code=status)
        if status >= 400:
            raise BookingFailedError(_error_message(data), status_code=status)

        record = data.get("appointment") if isinstance(data, dict) else None
        if not isinstance(record, dict):
            return Appointment(start_at=start_at)
        appointment_id = record.get("id")
        return Appointment(
            start_at=parse_instant(record.get("startAt")) or start_at,
            end_at=parse_instant(record.get("endAt")),
            appointment_id=str(appointment_id) if appointment_id is not None else None,
        )
