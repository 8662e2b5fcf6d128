"""
Tests for wall-clock to instant conversion and viewer-zone formatting.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from booking_scheduler.application.utils.timezones import (
    UNKNOWN_ZONE_LABEL,
    WallClock,
    format_local_datetime,
    local_day,
    local_midnight_utc,
    safe_timezone,
    start_of_week,
    time_zone_label,
    wall_clock_in_zone,
    zoned_time_to_utc,
)

NEW_YORK = ZoneInfo("America/New_York")


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_spring_forward_round_trip():
    """A wall clock just after the spring-forward jump converts and renders back unchanged."""
    instant = zoned_time_to_utc(WallClock(2024, 3, 10, 3, 30), "America/New_York")

    assert instant == _utc(2024, 3, 10, 7, 30)
    assert wall_clock_in_zone(instant, NEW_YORK) == WallClock(2024, 3, 10, 3, 30, 0)


def test_fall_back_ambiguous_time_returns_an_instant():
    """The repeated 01:30 on fall-back day resolves to one of its two instants."""
    instant = zoned_time_to_utc(WallClock(2024, 11, 3, 1, 30), NEW_YORK)

    assert instant in {_utc(2024, 11, 3, 5, 30), _utc(2024, 11, 3, 6, 30)}
    rendered = wall_clock_in_zone(instant, NEW_YORK)
    assert (rendered.hour, rendered.minute) == (1, 30)


def test_nonexistent_time_in_gap_does_not_raise():
    """02:30 on spring-forward day does not exist; a nearby instant comes back."""
    instant = zoned_time_to_utc(WallClock(2024, 3, 10, 2, 30), NEW_YORK)

    assert _utc(2024, 3, 10, 6, 0) <= instant <= _utc(2024, 3, 10, 8, 0)


def test_fixed_and_southern_hemisphere_offsets():
    """Half-hour and positive DST offsets convert correctly."""
    assert zoned_time_to_utc(WallClock(2025, 1, 6, 9, 0), "Asia/Kolkata") == _utc(2025, 1, 6, 3, 30)
    assert zoned_time_to_utc(WallClock(2025, 1, 6, 9, 0), "Australia/Sydney") == _utc(2025, 1, 5, 22, 0)


def test_local_midnight_tracks_dst():
    """Local midnight moves by an hour across the transition."""
    assert local_midnight_utc(date(2024, 3, 4), NEW_YORK) == _utc(2024, 3, 4, 5, 0)
    assert local_midnight_utc(date(2024, 3, 11), NEW_YORK) == _utc(2024, 3, 11, 4, 0)


def test_local_day_uses_viewer_zone():
    """An early-UTC instant still belongs to the previous day in New York."""
    assert local_day(_utc(2025, 1, 7, 3, 0), NEW_YORK) == date(2025, 1, 6)
    assert local_day(_utc(2025, 1, 7, 3, 0), ZoneInfo("UTC")) == date(2025, 1, 7)


def test_start_of_week_is_monday():
    assert start_of_week(date(2025, 1, 8)) == date(2025, 1, 6)
    assert start_of_week(date(2025, 1, 12)) == date(2025, 1, 6)
    assert start_of_week(date(2025, 1, 6)) == date(2025, 1, 6)


def test_format_local_datetime():
    """Confirmation times render in the viewer's zone."""
    instant = _utc(2025, 1, 6, 14, 0)

    assert format_local_datetime(instant, ZoneInfo("UTC")) == "Mon, Jan 6, 2:00 PM"
    assert format_local_datetime(instant, NEW_YORK) == "Mon, Jan 6, 9:00 AM"


def test_unknown_zone_falls_back():
    assert safe_timezone("Not/AZone") == ZoneInfo("UTC")
    assert safe_timezone(None) == ZoneInfo("UTC")
    assert time_zone_label("Not/AZone") == UNKNOWN_ZONE_LABEL
    assert time_zone_label("America/New_York") == "America/New_York"
