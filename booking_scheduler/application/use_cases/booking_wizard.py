from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable

from booking_scheduler.application.exceptions import (
    AvailabilityError,
    ContactValidationError,
    IdentityCreationError,
)
from booking_scheduler.application.use_cases.booking_commit import BookingCommitUseCase, CommitOutcome
from booking_scheduler.application.use_cases.now_clock import NowClock
from booking_scheduler.application.use_cases.selectability import (
    DEFAULT_LEAD_TIME,
    DEFAULT_SEARCH_DAYS,
    SelectabilityPolicy,
    TimeOption,
)
from booking_scheduler.application.use_cases.week_navigation import WeekNavigator
from booking_scheduler.application.utils.contact_rules import validate_contact
from booking_scheduler.application.utils.slot_index import build_slot_index
from booking_scheduler.application.utils.timezones import (
    ensure_utc,
    format_local_datetime,
    local_day,
    safe_timezone,
    time_zone_label,
)
from booking_scheduler.domain.entities.contact import ContactDetails, IdentityCreated, NormalizedPhone
from booking_scheduler.domain.entities.slot import Appointment
from booking_scheduler.domain.entities.wizard_state import AsyncRequest, WizardStep

SELECT_TIME_FIRST_MESSAGE = "Please select a time first."


class BookingWizard:
    """
    Three-step booking flow: pick a time, give contact details, see the confirmation.

    The wizard owns the booking identity (``request_id``). It is taken from the
    host when the visitor is already known, otherwise created on the first
    submission and reused for every later booking in the session. Contact
    details are only asked for while no identity exists.

    Only one identity-creation-plus-commit runs at a time; ``submission.pending``
    is the flag a UI uses to disable its submit control.
    """

    def __init__(
        self,
        navigator: WeekNavigator,
        commit_client: BookingCommitUseCase,
        clock: NowClock,
        viewer_time_zone: str | None,
        request_id: str | None = None,
        prefill: ContactDetails | None = None,
        on_identity: Callable[[str], None] | None = None,
        lead_time: timedelta = DEFAULT_LEAD_TIME,
        search_days: int = DEFAULT_SEARCH_DAYS,
    ) -> None:
        self._navigator = navigator
        self._commit_client = commit_client
        self._clock = clock
        self._prefill = prefill
        self._on_identity = on_identity
        self._lead_time = lead_time
        self._search_days = search_days
        self._identity_task: asyncio.Future[IdentityCreated] | None = None
        self._logger = logging.getLogger(__name__)

        self.viewer_time_zone = viewer_time_zone
        self.viewer_tz = safe_timezone(viewer_time_zone)
        self.request_id = request_id

        self.step = WizardStep.TIME_SELECTION
        self.selected_day: date = local_day(clock.now(), self.viewer_tz)
        self.selected_time: datetime | None = None
        self.contact = ContactDetails()
        self.phone_e164: str | None = None
        self.confirmed: Appointment | None = None
        self.error: str | None = None
        self.identity = AsyncRequest()
        self.submission = AsyncRequest()
        self.excluded: set[datetime] = set()
        self._searched_from: date | None = None

    @property
    def navigator(self) -> WeekNavigator:
        return self._navigator

    @property
    def policy(self) -> SelectabilityPolicy:
        return SelectabilityPolicy(
            now=self._clock.now(),
            index=self._navigator.index,
            viewer_tz=self.viewer_tz,
            lead_time=self._lead_time,
            search_days=self._search_days,
            excluded=frozenset(self.excluded),
        )

    @property
    def time_zone_label(self) -> str:
        return time_zone_label(self.viewer_time_zone)

    @property
    def time_options(self) -> list[TimeOption]:
        return self.policy.time_options(self.selected_day)

    @property
    def confirmed_label(self) -> str | None:
        if self.confirmed is None:
            return None
        return format_local_datetime(self.confirmed.start_at, self.viewer_tz)

    async def open(self) -> None:
        await self._navigator.load()
        await self.refresh()

    async def tick(self) -> None:
        self._clock.refresh()
        await self.refresh()

    async def run_clock(self) -> None:
        """Keep the selection fresh while the scheduler is on screen; cancel to stop."""
        await self._clock.run(lambda _now: self.refresh())

    async def refresh(self) -> None:
        """
        Re-apply the lead-time policy to the current selection.

        Safe to call at any time: a selected time that fell behind the lead time
        is dropped, and a selected day with nothing bookable left moves to the
        next bookable day, loading later weeks when the visible one has none.
        Day moves wait until the fetched slots match the visible window.
        """
        policy = self.policy
        if self.selected_time is not None and not policy.is_start_selectable(self.selected_time):
            self._logger.info("Selected time expired", extra={"request_id": self.request_id})
            self.selected_time = None

        if self._navigator.loaded_week != self._navigator.week_start:
            return
        if policy.is_day_selectable(self.selected_day):
            return

        day = policy.advance_if_stale(self.selected_day)
        if day == self.selected_day:
            found = await self._search_ahead()
            if found is None:
                return
            day = found
        self.selected_day = day
        self.selected_time = None

    async def _search_ahead(self) -> date | None:
        """
        Look through the weeks after the visible one, within the search bound,
        for the first bookable day. The week holding it becomes the visible one.

        Runs once per selected day; explicit navigation counts as that run.
        """
        origin = self.selected_day
        if self._searched_from == origin:
            return None
        self._searched_from = origin

        navigator = self._navigator
        home = navigator.week_start
        policy = self.policy
        limit = max(origin, policy.today) + timedelta(days=self._search_days)
        target = home + timedelta(days=7)

        while target < limit:
            try:
                slots = await navigator.fetch_window(target)
            except AvailabilityError as e:
                self._logger.warning(
                    "Look-ahead fetch failed",
                    extra={"week_start": target.isoformat(), "error": e.message},
                )
                return None
            if self.selected_day != origin or navigator.week_start != home or navigator.loaded_week != home:
                return None

            ahead = replace(self.policy, index=build_slot_index(slots, self.viewer_tz))
            day = ahead.advance_if_stale(target)
            if ahead.is_day_selectable(day) and day < limit:
                navigator.show(target, slots)
                return day
            target += timedelta(days=7)
        return None

    async def next_week(self) -> None:
        if await self._navigator.next():
            await self._enter_week()

    async def previous_week(self) -> None:
        if await self._navigator.previous():
            await self._enter_week()

    async def _enter_week(self) -> None:
        self.selected_time = None
        self.selected_day = self._navigator.week_start
        self._searched_from = self.selected_day
        await self.refresh()

    async def select_day(self, day: date) -> bool:
        """
        Select ``day``. Returns False, changing nothing, when the day is in the
        visible week but has nothing bookable.

        A day in another week moves the window there first; the selection then
        follows the same auto-advance as any other refresh.
        """
        if self.step is WizardStep.CONFIRMED:
            return False
        if not self._navigator.contains(day):
            if await self._navigator.show_week_of(day):
                self.selected_day = day
                self.selected_time = None
                self.step = WizardStep.TIME_SELECTION
                self._searched_from = None
                await self.refresh()
            return True
        if not self.policy.is_day_selectable(day):
            return False
        self.selected_day = day
        self.selected_time = None
        self.step = WizardStep.TIME_SELECTION
        return True

    def select_time(self, start_at: datetime) -> bool:
        if self.step is not WizardStep.TIME_SELECTION:
            return False
        start = ensure_utc(start_at)
        policy = self.policy
        if start not in {ensure_utc(o.slot.start_at) for o in policy.time_options(self.selected_day)}:
            return False
        if not policy.is_start_selectable(start):
            return False
        self.selected_time = start
        self.error = None
        return True

    def adopt_identity(self, request_id: str) -> None:
        """Use an identity the host already has for this visitor."""
        if self.request_id is None:
            self.request_id = request_id

    async def confirm_time(self) -> None:
        """Primary action on the time step."""
        if self.step is not WizardStep.TIME_SELECTION or self.submission.pending:
            return
        self.error = None
        if self.selected_time is None or not self.policy.is_start_selectable(self.selected_time):
            self.selected_time = None
            self.error = SELECT_TIME_FIRST_MESSAGE
            return

        if self.request_id:
            self.submission = AsyncRequest.started()
            await self._commit(self.request_id)
            return

        self.contact = self.contact.merged_with(self._prefill)
        self.step = WizardStep.CONTACT_DETAILS

    async def submit_details(self, contact: ContactDetails) -> None:
        if self.step is not WizardStep.CONTACT_DETAILS or self.submission.pending:
            return
        self.contact = contact
        self.error = None

        if self.selected_time is None:
            self.error = SELECT_TIME_FIRST_MESSAGE
            self.step = WizardStep.TIME_SELECTION
            return

        if self.request_id:
            self.submission = AsyncRequest.started()
            await self._commit(self.request_id)
            return

        try:
            validated, phone = validate_contact(contact)
        except ContactValidationError as e:
            self.error = e.message
            return
        self.contact = validated
        self.phone_e164 = phone.e164

        self.submission = AsyncRequest.started()
        try:
            request_id = await self.ensure_identity(validated, phone)
        except IdentityCreationError as e:
            self.submission = AsyncRequest.failed(e.message)
            self.error = e.message
            return
        await self._commit(request_id)

    async def ensure_identity(self, contact: ContactDetails, phone: NormalizedPhone) -> str:
        """Return the session identity, creating it at most once even under concurrent calls."""
        if self.request_id:
            return self.request_id

        if self._identity_task is None:
            self.identity = AsyncRequest.started()
            self._identity_task = asyncio.ensure_future(self._commit_client.create_identity(contact, phone))
        task = self._identity_task

        try:
            created = await task
        except IdentityCreationError as e:
            if self._identity_task is task:
                self._identity_task = None
                self.identity = AsyncRequest.failed(e.message)
            raise

        if self.request_id is None:
            self.request_id = created.request_id
            self.identity = AsyncRequest.succeeded()
            if self._on_identity is not None:
                self._on_identity(created.request_id)
        return self.request_id

    def back(self) -> None:
        if self.step is WizardStep.CONTACT_DETAILS and not self.submission.pending:
            self.step = WizardStep.TIME_SELECTION
            self.error = None

    def book_another(self) -> None:
        if self.step is not WizardStep.CONFIRMED:
            return
        self.confirmed = None
        self.selected_time = None
        self.error = None
        self.submission = AsyncRequest()
        self.step = WizardStep.TIME_SELECTION

    def dismiss_error(self) -> None:
        self.error = None
        self._navigator.dismiss_error()

    def close(self) -> None:
        self._navigator.abandon()

    async def _commit(self, request_id: str) -> None:
        start_at = self.selected_time
        if start_at is None:
            self.submission = AsyncRequest.failed(SELECT_TIME_FIRST_MESSAGE)
            self.error = SELECT_TIME_FIRST_MESSAGE
            self.step = WizardStep.TIME_SELECTION
            return

        result = await self._commit_client.commit(request_id, start_at, self.viewer_time_zone)

        if result.outcome is CommitOutcome.BOOKED:
            self.confirmed = result.appointment or Appointment(start_at=start_at)
            self.submission = AsyncRequest.succeeded()
            self.step = WizardStep.CONFIRMED
            return

        self.submission = AsyncRequest.failed(result.message or "")
        self.error = result.message

        if result.outcome is CommitOutcome.CONFLICT:
            self.excluded.add(start_at)
            self.selected_time = None
            self.step = WizardStep.TIME_SELECTION
            await self.refresh()
        elif result.outcome is CommitOutcome.NOT_FOUND:
            # the server no longer knows this identity; contact entry starts over
            self.request_id = None
            self._identity_task = None
            self.identity = AsyncRequest()
            self.contact = self.contact.merged_with(self._prefill)
            self.step = WizardStep.CONTACT_DETAILS
