from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Slot:
    start_at: datetime  # timezone-aware instant
    end_at: datetime
    capacity: int = 0  # open closers for this interval, "closerCount" on the wire


@dataclass(frozen=True)
class Appointment:
    start_at: datetime
    end_at: datetime | None = None
    appointment_id: str | None = None
