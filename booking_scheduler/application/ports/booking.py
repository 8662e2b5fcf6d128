from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from booking_scheduler.domain.entities.contact import ContactDetails, IdentityCreated
from booking_scheduler.domain.entities.slot import Appointment


class BookingPort(ABC):
    @abstractmethod
    async def create_identity(self, contact: ContactDetails, opted_in: bool = True) -> IdentityCreated:
        """Create a booking identity from normalized contact fields. Raises IdentityCreationError."""
        raise NotImplementedError

    @abstractmethod
    async def commit(
        self,
        request_id: str,
        start_at: datetime,
        duration_minutes: int,
        time_zone: str | None = None,
    ) -> Appointment:
        """Reserve the slot. Raises BookingNotFoundError, BookingConflictError or BookingFailedError."""
        raise NotImplementedError
