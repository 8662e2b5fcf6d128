from __future__ import annotations

import re

from booking_scheduler.application.exceptions import ContactValidationError
from booking_scheduler.domain.entities.contact import ContactDetails, NormalizedPhone

REQUIRED_FIELDS = ("name", "company", "email", "phone")

MISSING_FIELDS_MESSAGE = "Please fill out all required fields."
INVALID_PHONE_MESSAGE = "Please enter a valid phone number."
INVALID_EMAIL_MESSAGE = "Please enter a valid email address."

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _us_display(digits: str) -> str:
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def normalize_phone(raw: str) -> NormalizedPhone | None:
    """
    Normalize a phone number for display and E.164 storage.

    Without a leading ``+``, 10 digits (or 11 starting with ``1``) are read as a
    US number. Anything else with 10-15 digits passes through as ``+<digits>``.
    Returns None when the input cannot be a phone number.
    """
    text = (raw or "").strip()
    if not text:
        return None

    has_plus = text.startswith("+")
    digits = re.sub(r"\D", "", text)

    if len(digits) < 10 or len(digits) > 15:
        return None

    if not has_plus:
        if len(digits) == 10:
            return NormalizedPhone(display=_us_display(digits), e164=f"+1{digits}")
        if len(digits) == 11 and digits.startswith("1"):
            return NormalizedPhone(display=_us_display(digits[1:]), e164=f"+{digits}")

    return NormalizedPhone(display=f"+{digits}", e164=f"+{digits}")


def validate_contact(contact: ContactDetails) -> tuple[ContactDetails, NormalizedPhone]:
    """
    Trim and check contact details before they reach the network.

    Returns the trimmed details (phone in display form) and the normalized phone.
    Raises ContactValidationError naming the first offending field.
    """
    trimmed = ContactDetails(
        name=contact.name.strip(),
        company=contact.company.strip(),
        email=contact.email.strip(),
        phone=contact.phone.strip(),
        goals=contact.goals.strip(),
    )

    for field in REQUIRED_FIELDS:
        if not getattr(trimmed, field):
            raise ContactValidationError(MISSING_FIELDS_MESSAGE, field=field)

    if not _EMAIL_RE.match(trimmed.email):
        raise ContactValidationError(INVALID_EMAIL_MESSAGE, field="email")

    phone = normalize_phone(trimmed.phone)
    if phone is None:
        raise ContactValidationError(INVALID_PHONE_MESSAGE, field="phone")

    return (
        ContactDetails(
            name=trimmed.name,
            company=trimmed.company,
            email=trimmed.email,
            phone=phone.display,
            goals=trimmed.goals,
        ),
        phone,
    )
