from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from booking_scheduler.application.exceptions import (
    BookingConflictError,
    BookingFailedError,
    BookingNotFoundError,
    IdentityCreationError,
)
from booking_scheduler.application.ports.availability import AvailabilityPort
from booking_scheduler.application.ports.booking import BookingPort
from booking_scheduler.application.utils.timezones import WallClock, ensure_utc, zoned_time_to_utc
from booking_scheduler.domain.entities.contact import ContactDetails, IdentityCreated
from booking_scheduler.domain.entities.slot import Appointment, Slot


class MockPortal(AvailabilityPort, BookingPort):
    """
    In-memory stand-in for the portal endpoints, for local runs and tests.

    Slots are whatever it was seeded with. Each commit takes one unit of the
    slot's capacity; a slot at zero capacity is no longer suggested and
    commits against it conflict.
    """

    def __init__(self, slots: list[Slot] | None = None) -> None:
        self._slots: dict[datetime, Slot] = {}
        self._requests: dict[str, IdentityCreated] = {}
        self._appointments: list[Appointment] = []
        self._logger = logging.getLogger(__name__)
        self.suggest_calls = 0
        self.identity_calls = 0
        self.commit_calls = 0
        for slot in slots or []:
            self._slots[ensure_utc(slot.start_at)] = slot

    @staticmethod
    def business_hours(
        first_day: date,
        days: int,
        time_zone: str,
        start_hour: int = 9,
        end_hour: int = 17,
        duration_minutes: int = 30,
        capacity: int = 2,
    ) -> list[Slot]:
        """Half-hour slots during weekday business hours in the business's own zone."""
        slots: list[Slot] = []
        for offset in range(days):
            day = first_day + timedelta(days=offset)
            if day.weekday() >= 5:
                continue
            current = zoned_time_to_utc(WallClock.of(day, start_hour), time_zone)
            day_end = zoned_time_to_utc(WallClock.of(day, end_hour), time_zone)
            while current + timedelta(minutes=duration_minutes) <= day_end:
                slots.append(
                    Slot(
                        start_at=current,
                        end_at=current + timedelta(minutes=duration_minutes),
                        capacity=capacity,
                    )
                )
                current += timedelta(minutes=30)
        return slots

    @property
    def appointments(self) -> list[Appointment]:
        return list(self._appointments)

    def take_slot(self, start_at: datetime) -> None:
        """Simulate another booker taking every remaining seat."""
        start = ensure_utc(start_at)
        slot = self._slots.get(start)
        if slot is not None:
            self._slots[start] = Slot(start_at=slot.start_at, end_at=slot.end_at, capacity=0)

    def forget_request(self, request_id: str) -> None:
        self._requests.pop(request_id, None)

    async def suggest_slots(
        self,
        start_at: datetime,
        days: int,
        duration_minutes: int,
        limit: int,
    ) -> list[Slot]:
        self.suggest_calls += 1
        window_start = ensure_utc(start_at)
        window_end = window_start + timedelta(days=days)
        found = [
            slot
            for start, slot in sorted(self._slots.items())
            if window_start <= start and start + timedelta(minutes=duration_minutes) <= window_end and slot.capacity > 0
        ]
        return found[:limit]

    async def create_identity(self, contact: ContactDetails, opted_in: bool = True) -> IdentityCreated:
        self.identity_calls += 1
        if not all((contact.name, contact.company, contact.email, contact.phone)):
            raise IdentityCreationError()
        request_id = f"mock_request_{self.identity_calls}"
        identity = IdentityCreated(request_id=request_id, lead_id=f"mock_lead_{self.identity_calls}")
        self._requests[request_id] = identity
        self._logger.info("Mock demo request created", extra={"request_id": request_id})
        return identity

    async def commit(
        self,
        request_id: str,
        start_at: datetime,
        duration_minutes: int,
        time_zone: str | None = None,
    ) -> Appointment:
        self.commit_calls += 1
        if not 10 <= duration_minutes <= 180:
            raise BookingFailedError("Please choose a time and try again.", status_code=400)
        if request_id not in self._requests:
            raise BookingNotFoundError(status_code=404)

        start = ensure_utc(start_at)
        slot = self._slots.get(start)
        if slot is None or slot.capacity <= 0:
            raise BookingConflictError(status_code=409)

        self._slots[start] = Slot(start_at=slot.start_at, end_at=slot.end_at, capacity=slot.capacity - 1)
        appointment = Appointment(
            start_at=start,
            end_at=start + timedelta(minutes=duration_minutes),
            appointment_id=f"mock_appointment_{len(self._appointments) + 1}",
        )
        self._appointments.append(appointment)
        self._logger.info("Mock appointment booked", extra={"request_id": request_id})
        return appointment
