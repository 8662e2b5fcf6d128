from datetime import date, timedelta
from functools import lru_cache
from typing import Callable
import logging

from booking_scheduler.core.config import settings
from booking_scheduler.application.ports.availability import AvailabilityPort
from booking_scheduler.application.ports.booking import BookingPort
from booking_scheduler.application.ports.session_store import SessionStorePort
from booking_scheduler.application.use_cases.booking_commit import BookingCommitUseCase
from booking_scheduler.application.use_cases.booking_wizard import BookingWizard
from booking_scheduler.application.use_cases.now_clock import NowClock
from booking_scheduler.application.use_cases.week_navigation import WeekNavigator
from booking_scheduler.application.utils.timezones import is_known_timezone, local_day, safe_timezone
from booking_scheduler.domain.entities.contact import ContactDetails
from booking_scheduler.infrastructure.portal.mock_portal import MockPortal
from booking_scheduler.infrastructure.portal.portal_api_client import PortalApiClient
from booking_scheduler.infrastructure.store.memory_store import MemorySessionStore


_session_store: MemorySessionStore | None = None


@lru_cache
def get_portal() -> PortalApiClient | MockPortal:
    logger = logging.getLogger(__name__)
    if settings.ENV.lower() in {"dev", "local"}:
        logger.info("Using MockPortal (ENV=dev/local)")
        today = date.today()
        return MockPortal(
            MockPortal.business_hours(
                first_day=today - timedelta(days=today.weekday()),
                days=28,
                time_zone=settings.MOCK_PORTAL_TIMEZONE,
                duration_minutes=settings.BOOKING_DURATION_MINUTES,
            )
        )
    logger.info("Using PortalApiClient base_url=%s", settings.PORTAL_BASE_URL)
    return PortalApiClient()


def get_availability() -> AvailabilityPort:
    return get_portal()


def get_booking() -> BookingPort:
    return get_portal()


def get_session_store() -> SessionStorePort:
    global _session_store
    if _session_store is None:
        _session_store = MemorySessionStore()
    return _session_store


def build_wizard(
    viewer_time_zone: str | None,
    request_id: str | None = None,
    prefill: ContactDetails | None = None,
    availability: AvailabilityPort | None = None,
    booking: BookingPort | None = None,
    clock: NowClock | None = None,
    on_identity: Callable[[str], None] | None = None,
) -> BookingWizard:
    zone_name = viewer_time_zone if is_known_timezone(viewer_time_zone) else settings.DEFAULT_VIEWER_TIMEZONE
    tz = safe_timezone(zone_name)
    clock = clock or NowClock(tick_seconds=settings.CLOCK_TICK_SECONDS)
    navigator = WeekNavigator(
        availability=availability or get_availability(),
        viewer_tz=tz,
        today=local_day(clock.now(), tz),
        window_days=settings.BOOKING_WINDOW_DAYS,
        duration_minutes=settings.BOOKING_DURATION_MINUTES,
        limit=settings.BOOKING_SLOT_LIMIT,
    )
    return BookingWizard(
        navigator=navigator,
        commit_client=BookingCommitUseCase(
            booking=booking or get_booking(),
            duration_minutes=settings.BOOKING_DURATION_MINUTES,
        ),
        clock=clock,
        viewer_time_zone=zone_name,
        request_id=request_id,
        prefill=prefill,
        on_identity=on_identity,
        lead_time=timedelta(minutes=settings.BOOKING_LEAD_TIME_MINUTES),
        search_days=settings.BOOKING_ADVANCE_SEARCH_DAYS,
    )
