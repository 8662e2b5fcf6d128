from __future__ import annotations

import logging
from datetime import date, timedelta
from zoneinfo import ZoneInfo

from booking_scheduler.application.exceptions import AvailabilityError
from booking_scheduler.application.ports.availability import AvailabilityPort
from booking_scheduler.application.utils.slot_index import SlotIndex, build_slot_index
from booking_scheduler.application.utils.timezones import local_midnight_utc, start_of_week
from booking_scheduler.domain.entities.slot import Slot
from booking_scheduler.domain.entities.wizard_state import AsyncRequest


class WeekNavigator:
    """
    Visible window of consecutive days and the slots fetched for it.

    Each load bumps a generation counter; a response that comes back after a
    newer load was started is dropped, so the displayed window is always the
    one most recently asked for. A failed load keeps the previous week and
    its slots on display.
    """

    def __init__(
        self,
        availability: AvailabilityPort,
        viewer_tz: ZoneInfo,
        today: date,
        window_days: int = 7,
        duration_minutes: int = 30,
        limit: int = 50,
    ) -> None:
        self._availability = availability
        self._viewer_tz = viewer_tz
        self._window_days = window_days
        self._duration_minutes = duration_minutes
        self._limit = limit
        self._generation = 0
        self._logger = logging.getLogger(__name__)

        self.week_start: date = start_of_week(today)
        self.loaded_week: date | None = None
        self.slots: list[Slot] = []
        self.index: SlotIndex = {}
        self.fetch: AsyncRequest = AsyncRequest()

    @property
    def days(self) -> list[date]:
        return [self.week_start + timedelta(days=i) for i in range(self._window_days)]

    def contains(self, day: date) -> bool:
        return self.week_start <= day < self.week_start + timedelta(days=self._window_days)

    async def fetch_window(self, week_start: date) -> list[Slot]:
        """Fetch the slots of the window starting at ``week_start`` without showing them."""
        return await self._availability.suggest_slots(
            start_at=local_midnight_utc(week_start, self._viewer_tz),
            days=self._window_days,
            duration_minutes=self._duration_minutes,
            limit=self._limit,
        )

    async def load(self) -> bool:
        """
        Fetch slots for the current window. Returns True when the result was applied.

        On failure the window moves back to the last week that loaded, so the
        slots still on display belong to the days being shown.
        """
        self._generation += 1
        generation = self._generation
        week_start = self.week_start
        self.fetch = AsyncRequest.started()

        try:
            slots = await self.fetch_window(week_start)
        except AvailabilityError as e:
            if generation != self._generation:
                return False
            if self.loaded_week is not None:
                self.week_start = self.loaded_week
            self.fetch = AsyncRequest.failed(e.message)
            self._logger.warning(
                "Availability fetch failed",
                extra={"week_start": week_start.isoformat(), "error": e.message},
            )
            return False

        if generation != self._generation:
            self._logger.info("Dropping stale availability response", extra={"week_start": week_start.isoformat()})
            return False

        self._apply(week_start, slots)
        return True

    def show(self, week_start: date, slots: list[Slot]) -> None:
        """Display slots fetched with ``fetch_window``, superseding any load in flight."""
        self._generation += 1
        self._apply(week_start, slots)

    def _apply(self, week_start: date, slots: list[Slot]) -> None:
        self.week_start = week_start
        self.slots = slots
        self.index = build_slot_index(slots, self._viewer_tz)
        self.loaded_week = week_start
        self.fetch = AsyncRequest.succeeded()
        self._logger.info(
            "Availability loaded",
            extra={"week_start": week_start.isoformat(), "slot_count": len(slots)},
        )

    async def next(self) -> bool:
        self.week_start = self.week_start + timedelta(days=7)
        return await self.load()

    async def previous(self) -> bool:
        self.week_start = self.week_start - timedelta(days=7)
        return await self.load()

    async def show_week_of(self, day: date) -> bool:
        """Reposition to the week containing ``day``; refetches only if the week changes."""
        target = start_of_week(day)
        if target == self.week_start and self.loaded_week == target:
            return True
        self.week_start = target
        return await self.load()

    def abandon(self) -> None:
        """Stop caring about any in-flight load."""
        self._generation += 1
        if self.fetch.pending:
            self.fetch = AsyncRequest()

    def dismiss_error(self) -> None:
        if self.fetch.error:
            self.fetch = AsyncRequest()
