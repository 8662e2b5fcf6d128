from __future__ import annotations


class SchedulerError(RuntimeError):
    """Base for every error the booking scheduler surfaces to the visitor."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AvailabilityError(SchedulerError):
    """Raised when the suggestion query fails (network, server error or bad payload)."""

    default_message = "Unable to load availability."


class ContactValidationError(SchedulerError):
    """Raised locally when contact details are missing or the phone is unparseable."""

    default_message = "Please fill out all required fields."

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class IdentityCreationError(SchedulerError):
    """Raised when the server rejects the contact details for a new booking identity."""

    default_message = "Please check your details and try again."


class BookingCommitError(SchedulerError):
    """Base for failures of the booking commit call."""

    default_message = "We could not book that time. Please try again."

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BookingNotFoundError(BookingCommitError):
    """Raised on 404: the booking identity is unknown or expired."""

    default_message = "We could not find your request. Please try again."


class BookingConflictError(BookingCommitError):
    """Raised on 409: the slot became unavailable before it could be reserved."""

    default_message = "That time just became unavailable. Please choose a different time."


class BookingFailedError(BookingCommitError):
    """Raised for any other commit failure, including validation errors."""
