from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

from booking_scheduler.application.utils.timezones import ensure_utc, local_day
from booking_scheduler.domain.entities.slot import Slot

SlotIndex = dict[date, list[Slot]]


def build_slot_index(slots: list[Slot], viewer_tz: ZoneInfo) -> SlotIndex:
    """
    Bucket slots by the viewer-local calendar day of their start.

    Every call builds a fresh index; buckets are sorted by start instant and the
    sort is stable, so ties keep input order.
    """
    index: SlotIndex = {}
    for slot in slots:
        index.setdefault(local_day(slot.start_at, viewer_tz), []).append(slot)
    for day, bucket in index.items():
        index[day] = sorted(bucket, key=lambda s: ensure_utc(s.start_at))
    return index


def slots_for_day(index: SlotIndex, day: date) -> list[Slot]:
    return list(index.get(day, []))
