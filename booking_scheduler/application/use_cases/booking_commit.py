from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from booking_scheduler.application.exceptions import (
    BookingCommitError,
    BookingConflictError,
    BookingNotFoundError,
)
from booking_scheduler.application.ports.booking import BookingPort
from booking_scheduler.domain.entities.contact import ContactDetails, IdentityCreated, NormalizedPhone
from booking_scheduler.domain.entities.slot import Appointment


class CommitOutcome(str, Enum):
    BOOKED = "booked"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass(frozen=True)
class CommitResult:
    outcome: CommitOutcome
    appointment: Appointment | None = None
    message: str | None = None

    @property
    def booked(self) -> bool:
        return self.outcome is CommitOutcome.BOOKED


class BookingCommitUseCase:
    def __init__(self, booking: BookingPort, duration_minutes: int = 30) -> None:
        self._booking = booking
        self._duration_minutes = duration_minutes
        self._logger = logging.getLogger(__name__)

    @property
    def duration_minutes(self) -> int:
        return self._duration_minutes

    async def create_identity(self, contact: ContactDetails, phone: NormalizedPhone) -> IdentityCreated:
        """Send validated contact fields with the phone in E.164. Raises IdentityCreationError."""
        payload = ContactDetails(
            name=contact.name,
            company=contact.company,
            email=contact.email,
            phone=phone.e164,
            goals=contact.goals,
        )
        identity = await self._booking.create_identity(payload, opted_in=True)
        self._logger.info("Booking identity created", extra={"request_id": identity.request_id})
        return identity

    async def commit(
        self,
        request_id: str,
        start_at: datetime,
        viewer_time_zone: str | None = None,
        duration_minutes: int | None = None,
    ) -> CommitResult:
        """Try to reserve ``start_at``; never raises for server-side outcomes."""
        try:
            appointment = await self._booking.commit(
                request_id=request_id,
                start_at=start_at,
                duration_minutes=duration_minutes or self._duration_minutes,
                time_zone=viewer_time_zone,
            )
        except BookingNotFoundError as e:
            self._logger.warning("Booking identity not found", extra={"request_id": request_id, "outcome": "not_found"})
            return CommitResult(outcome=CommitOutcome.NOT_FOUND, message=e.message)
        except BookingConflictError as e:
            self._logger.warning("Slot taken before commit", extra={"request_id": request_id, "outcome": "conflict"})
            return CommitResult(outcome=CommitOutcome.CONFLICT, message=e.message)
        except BookingCommitError as e:
            self._logger.warning(
                "Booking commit failed",
                extra={"request_id": request_id, "outcome": "failed", "status": e.status_code},
            )
            return CommitResult(outcome=CommitOutcome.FAILED, message=e.message)

        self._logger.info("Booking committed", extra={"request_id": request_id, "outcome": "booked"})
        return CommitResult(outcome=CommitOutcome.BOOKED, appointment=appointment)
