from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class WizardStep(str, Enum):
    TIME_SELECTION = "time"
    CONTACT_DETAILS = "details"
    CONFIRMED = "confirm"


class RequestStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class AsyncRequest:
    """Observable state of one async boundary (fetch, identity creation, commit)."""

    status: RequestStatus = RequestStatus.IDLE
    error: str | None = None

    @property
    def pending(self) -> bool:
        return self.status is RequestStatus.PENDING

    @staticmethod
    def started() -> "AsyncRequest":
        return AsyncRequest(status=RequestStatus.PENDING)

    @staticmethod
    def succeeded() -> "AsyncRequest":
        return AsyncRequest(status=RequestStatus.SUCCESS)

    @staticmethod
    def failed(error: str) -> "AsyncRequest":
        return AsyncRequest(status=RequestStatus.FAILURE, error=error)
