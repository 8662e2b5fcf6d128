from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from booking_scheduler.domain.entities.slot import Slot


class AvailabilityPort(ABC):
    @abstractmethod
    async def suggest_slots(
        self,
        start_at: datetime,
        days: int,
        duration_minutes: int,
        limit: int,
    ) -> list[Slot]:
        """Return suggested slots for the window. Raises AvailabilityError."""
        raise NotImplementedError
