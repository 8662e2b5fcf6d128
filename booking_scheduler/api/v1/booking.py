from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Response

from booking_scheduler.api.v1.schemas import (
    AdoptIdentityRequestSchema,
    ContactSchema,
    DaySchema,
    OpenSessionRequestSchema,
    RequestStateSchema,
    SelectDayRequestSchema,
    SelectTimeRequestSchema,
    SessionViewSchema,
    TimeOptionSchema,
)
from booking_scheduler.application.ports.session_store import SessionStorePort
from booking_scheduler.application.use_cases.booking_wizard import BookingWizard
from booking_scheduler.application.utils.timezones import ensure_utc, format_local_time, format_month_day
from booking_scheduler.domain.entities.contact import ContactDetails
from booking_scheduler.wiring.dependencies import build_wizard, get_session_store

router = APIRouter(prefix="/booking")
logger = logging.getLogger(__name__)

WizardFactory = Callable[..., BookingWizard]
IdentityListener = Callable[[str], None]


def get_wizard_factory() -> WizardFactory:
    return build_wizard


def get_identity_listener() -> IdentityListener | None:
    """Override to persist booking identities as sessions create them."""
    return None


def _load_wizard(session_id: str, store: SessionStorePort) -> BookingWizard:
    wizard = store.get(session_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Booking session not found")
    return wizard


def _render(session_id: str, wizard: BookingWizard) -> SessionViewSchema:
    navigator = wizard.navigator
    policy = wizard.policy
    tz = wizard.viewer_tz
    selected_time = ensure_utc(wizard.selected_time) if wizard.selected_time else None
    days = navigator.days

    return SessionViewSchema(
        session_id=session_id,
        step=wizard.step,
        time_zone=wizard.viewer_time_zone,
        time_zone_label=wizard.time_zone_label,
        week_start=navigator.week_start,
        week_label=f"{format_month_day(days[0])} to {format_month_day(days[-1])}",
        days=[
            DaySchema(
                day=day,
                label=f"{day:%a} {day.day}",
                selectable=policy.is_day_selectable(day),
                selected=day == wizard.selected_day,
            )
            for day in days
        ],
        selected_day=wizard.selected_day,
        times=[
            TimeOptionSchema(
                start_at=option.slot.start_at,
                label=format_local_time(option.slot.start_at, tz),
                disabled=option.disabled,
                selected=ensure_utc(option.slot.start_at) == selected_time,
            )
            for option in policy.time_options(wizard.selected_day)
        ],
        selected_time=selected_time,
        has_identity=wizard.request_id is not None,
        contact=ContactSchema(**asdict(wizard.contact)),
        phone_e164=wizard.phone_e164,
        error=wizard.error,
        availability=RequestStateSchema(status=navigator.fetch.status, error=navigator.fetch.error),
        submission=RequestStateSchema(status=wizard.submission.status, error=wizard.submission.error),
        navigation_disabled=navigator.fetch.pending,
        submit_disabled=wizard.selected_time is None or wizard.submission.pending,
        confirmed_start_at=wizard.confirmed.start_at if wizard.confirmed else None,
        confirmed_label=wizard.confirmed_label,
    )


@router.post("/sessions", response_model=SessionViewSchema, status_code=201)
async def open_session(
    req: OpenSessionRequestSchema,
    store: SessionStorePort = Depends(get_session_store),
    factory: WizardFactory = Depends(get_wizard_factory),
    on_identity: IdentityListener | None = Depends(get_identity_listener),
):
    prefill = ContactDetails(**req.prefill.model_dump()) if req.prefill else None
    wizard = factory(
        viewer_time_zone=req.time_zone,
        request_id=req.request_id,
        prefill=prefill,
        on_identity=on_identity,
    )
    await wizard.open()
    session_id = store.create(wizard)
    logger.info("Booking session opened", extra={"session_id": session_id, "request_id": req.request_id})
    return _render(session_id, wizard)


@router.get("/sessions/{session_id}", response_model=SessionViewSchema)
async def get_session(session_id: str, store: SessionStorePort = Depends(get_session_store)):
    wizard = _load_wizard(session_id, store)
    await wizard.tick()
    return _render(session_id, wizard)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str, store: SessionStorePort = Depends(get_session_store)) -> Response:
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail="Booking session not found")
    return Response(status_code=204)


@router.post("/sessions/{session_id}/week/next", response_model=SessionViewSchema)
async def next_week(session_id: str, store: SessionStorePort = Depends(get_session_store)):
    wizard = _load_wizard(session_id, store)
    await wizard.next_week()
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/week/previous", response_model=SessionViewSchema)
async def previous_week(session_id: str, store: SessionStorePort = Depends(get_session_store)):
    wizard = _load_wizard(session_id, store)
    await wizard.previous_week()
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/day", response_model=SessionViewSchema)
async def select_day(
    session_id: str,
    req: SelectDayRequestSchema,
    store: SessionStorePort = Depends(get_session_store),
):
    wizard = _load_wizard(session_id, store)
    if not await wizard.select_day(req.day):
        raise HTTPException(status_code=400, detail="That day has no available times.")
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/time", response_model=SessionViewSchema)
async def select_time(
    session_id: str,
    req: SelectTimeRequestSchema,
    store: SessionStorePort = Depends(get_session_store),
):
    wizard = _load_wizard(session_id, store)
    await wizard.tick()
    if not wizard.select_time(req.start_at):
        raise HTTPException(status_code=400, detail="That time is not available.")
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/identity", response_model=SessionViewSchema)
async def adopt_identity(
    session_id: str,
    req: AdoptIdentityRequestSchema,
    store: SessionStorePort = Depends(get_session_store),
):
    wizard = _load_wizard(session_id, store)
    wizard.adopt_identity(req.request_id)
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/confirm", response_model=SessionViewSchema)
async def confirm_time(session_id: str, store: SessionStorePort = Depends(get_session_store)):
    wizard = _load_wizard(session_id, store)
    await wizard.tick()
    await wizard.confirm_time()
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/details", response_model=SessionViewSchema)
async def submit_details(
    session_id: str,
    req: ContactSchema,
    store: SessionStorePort = Depends(get_session_store),
):
    wizard = _load_wizard(session_id, store)
    await wizard.submit_details(ContactDetails(**req.model_dump()))
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/back", response_model=SessionViewSchema)
async def back(session_id: str, store: SessionStorePort = Depends(get_session_store)):
    wizard = _load_wizard(session_id, store)
    wizard.back()
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/reset", response_model=SessionViewSchema)
async def book_another(session_id: str, store: SessionStorePort = Depends(get_session_store)):
    wizard = _load_wizard(session_id, store)
    wizard.book_another()
    return _render(session_id, wizard)


@router.post("/sessions/{session_id}/dismiss-error", response_model=SessionViewSchema)
async def dismiss_error(session_id: str, store: SessionStorePort = Depends(get_session_store)):
    wizard = _load_wizard(session_id, store)
    wizard.dismiss_error()
    return _render(session_id, wizard)
