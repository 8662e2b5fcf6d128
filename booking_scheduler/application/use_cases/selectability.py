from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from booking_scheduler.application.utils.slot_index import SlotIndex
from booking_scheduler.application.utils.timezones import ensure_utc, local_day
from booking_scheduler.domain.entities.slot import Slot

DEFAULT_LEAD_TIME = timedelta(minutes=30)
DEFAULT_SEARCH_DAYS = 14


@dataclass(frozen=True)
class TimeOption:
    slot: Slot
    disabled: bool


@dataclass(frozen=True)
class SelectabilityPolicy:
    """
    Which days and slots can be booked at ``now``.

    Pure and side-effect free: build a new policy whenever the clock ticks or
    the slot index is rebuilt. Slot starts listed in ``excluded`` (slots that
    lost a booking race) are treated as unselectable.
    """

    now: datetime
    index: SlotIndex
    viewer_tz: ZoneInfo
    lead_time: timedelta = DEFAULT_LEAD_TIME
    search_days: int = DEFAULT_SEARCH_DAYS
    excluded: frozenset[datetime] = frozenset()

    @property
    def min_bookable_at(self) -> datetime:
        return ensure_utc(self.now) + self.lead_time

    @property
    def today(self) -> date:
        return local_day(self.now, self.viewer_tz)

    def is_start_selectable(self, start_at: datetime) -> bool:
        start = ensure_utc(start_at)
        return start >= self.min_bookable_at and start not in self.excluded

    def is_slot_selectable(self, slot: Slot) -> bool:
        return self.is_start_selectable(slot.start_at)

    def is_day_selectable(self, day: date) -> bool:
        if day < self.today:
            return False
        return any(self.is_slot_selectable(slot) for slot in self.index.get(day, []))

    def advance_if_stale(self, current_day: date) -> date:
        """Return ``current_day`` if still selectable, else the first selectable day ahead of it."""
        if self.is_day_selectable(current_day):
            return current_day
        start = max(current_day, self.today)
        for offset in range(self.search_days):
            candidate = start + timedelta(days=offset)
            if self.is_day_selectable(candidate):
                return candidate
        return current_day

    def time_options(self, day: date) -> list[TimeOption]:
        return [
            TimeOption(slot=slot, disabled=not self.is_slot_selectable(slot))
            for slot in self.index.get(day, [])
        ]

    def selectable_starts(self, day: date) -> list[datetime]:
        return [ensure_utc(option.slot.start_at) for option in self.time_options(day) if not option.disabled]
