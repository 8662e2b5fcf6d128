from datetime import date, datetime

from pydantic import BaseModel, Field

from booking_scheduler.domain.entities.wizard_state import RequestStatus, WizardStep


class ContactSchema(BaseModel):
    name: str = Field(default="", max_length=120)
    company: str = Field(default="", max_length=160)
    email: str = Field(default="", max_length=200)
    phone: str = Field(default="", max_length=40)
    goals: str = Field(default="", max_length=400)


class OpenSessionRequestSchema(BaseModel):
    time_zone: str | None = None
    request_id: str | None = None
    prefill: ContactSchema | None = None


class SelectDayRequestSchema(BaseModel):
    day: date


class SelectTimeRequestSchema(BaseModel):
    start_at: datetime


class AdoptIdentityRequestSchema(BaseModel):
    request_id: str = Field(min_length=1)


class DaySchema(BaseModel):
    day: date
    label: str
    selectable: bool
    selected: bool


class TimeOptionSchema(BaseModel):
    start_at: datetime
    label: str
    disabled: bool
    selected: bool


class RequestStateSchema(BaseModel):
    status: RequestStatus
    error: str | None = None


class SessionViewSchema(BaseModel):
    session_id: str
    step: WizardStep
    time_zone: str | None
    time_zone_label: str
    week_start: date
    week_label: str
    days: list[DaySchema]
    selected_day: date
    times: list[TimeOptionSchema]
    selected_time: datetime | None = None
    has_identity: bool
    contact: ContactSchema
    phone_e164: str | None = None
    error: str | None = None
    availability: RequestStateSchema
    submission: RequestStateSchema
    navigation_disabled: bool
    submit_disabled: bool
    confirmed_start_at: datetime | None = None
    confirmed_label: str | None = None
