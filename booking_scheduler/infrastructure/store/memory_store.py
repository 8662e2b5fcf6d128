from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from booking_scheduler.application.ports.session_store import SessionStorePort

if TYPE_CHECKING:
    from booking_scheduler.application.use_cases.booking_wizard import BookingWizard


class MemorySessionStore(SessionStorePort):
    def __init__(self, session_limit: int = 1000) -> None:
        self._sessions: dict[str, "BookingWizard"] = {}
        self._session_limit = session_limit

    def create(self, wizard: "BookingWizard") -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = wizard
        if len(self._sessions) > self._session_limit:
            oldest = next(iter(self._sessions))
            self._sessions.pop(oldest).close()
        return session_id

    def get(self, session_id: str) -> "BookingWizard | None":
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        wizard = self._sessions.pop(session_id, None)
        if wizard is None:
            return False
        wizard.close()
        return True
