from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable


def system_now() -> datetime:
    return datetime.now(timezone.utc)


class NowClock:
    """Current instant, refreshed every ``tick_seconds`` while ``run`` is active."""

    def __init__(self, tick_seconds: float = 30.0, source: Callable[[], datetime] | None = None) -> None:
        self._tick_seconds = tick_seconds
        self._source = source or system_now
        self._now = self._source()

    @property
    def tick_seconds(self) -> float:
        return self._tick_seconds

    def now(self) -> datetime:
        return self._now

    def refresh(self) -> datetime:
        self._now = self._source()
        return self._now

    async def run(self, on_tick: Callable[[datetime], Awaitable[None]]) -> None:
        """Tick until cancelled."""
        while True:
            await asyncio.sleep(self._tick_seconds)
            await on_tick(self.refresh())
