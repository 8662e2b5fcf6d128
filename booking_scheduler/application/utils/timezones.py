from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

UNKNOWN_ZONE_LABEL = "your local time"


@dataclass(frozen=True)
class WallClock:
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    @staticmethod
    def of(day: date, hour: int = 0, minute: int = 0) -> "WallClock":
        return WallClock(day.year, day.month, day.day, hour, minute)


def safe_timezone(name: str | None, fallback: str = "UTC") -> ZoneInfo:
    if not name:
        return ZoneInfo(fallback)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(fallback)


def is_known_timezone(name: str | None) -> bool:
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def time_zone_label(name: str | None) -> str:
    return name if is_known_timezone(name) else UNKNOWN_ZONE_LABEL


def ensure_utc(instant: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def wall_clock_in_zone(instant: datetime, tz: ZoneInfo) -> WallClock:
    local = ensure_utc(instant).astimezone(tz)
    return WallClock(local.year, local.month, local.day, local.hour, local.minute, local.second)


def _as_if_utc(wall: WallClock) -> datetime:
    return datetime(wall.year, wall.month, wall.day, wall.hour, wall.minute, wall.second, tzinfo=timezone.utc)


def zoned_time_to_utc(wall: WallClock, time_zone: str | ZoneInfo) -> datetime:
    """
    Convert a wall-clock time as experienced in ``time_zone`` to a UTC instant.

    Starts from the wall clock read as UTC, renders the guess back into the zone
    and shifts by the difference, twice. The second pass corrects a first guess
    that landed on the other side of a DST transition.

    Wall clocks inside a spring-forward gap or a fall-back repeat are not
    detected: the result is whichever nearby instant the two passes reach.
    """
    tz = ZoneInfo(time_zone) if isinstance(time_zone, str) else time_zone
    desired = _as_if_utc(wall)
    guess = desired
    for _ in range(2):
        rendered = _as_if_utc(wall_clock_in_zone(guess, tz))
        guess = guess + (desired - rendered)
    return guess


def local_day(instant: datetime, tz: ZoneInfo) -> date:
    return ensure_utc(instant).astimezone(tz).date()


def local_midnight_utc(day: date, tz: str | ZoneInfo) -> datetime:
    return zoned_time_to_utc(WallClock.of(day), tz)


def start_of_week(day: date) -> date:
    """Weeks start on Monday."""
    return day - timedelta(days=day.weekday())


def format_local_datetime(instant: datetime, tz: ZoneInfo) -> str:
    """Render like ``Mon, Jan 6, 2:00 PM`` in the viewer's zone."""
    local = ensure_utc(instant).astimezone(tz)
    hour = local.hour % 12 or 12
    return f"{local:%a}, {local:%b} {local.day}, {hour}:{local:%M} {local:%p}"


def format_month_day(day: date) -> str:
    return f"{day:%b} {day.day}"


def format_local_time(instant: datetime, tz: ZoneInfo) -> str:
    local = ensure_utc(instant).astimezone(tz)
    hour = local.hour % 12 or 12
    return f"{hour}:{local:%M} {local:%p}"
