from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from booking_scheduler.application.use_cases.booking_wizard import BookingWizard


class SessionStorePort(ABC):
    @abstractmethod
    def create(self, wizard: "BookingWizard") -> str:
        """Store a new wizard session. Returns session_id."""
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> "BookingWizard | None":
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        raise NotImplementedError
