"""
Tests for phone normalization and contact validation.
"""

from __future__ import annotations

import pytest

from booking_scheduler.application.exceptions import ContactValidationError
from booking_scheduler.application.utils.contact_rules import (
    INVALID_EMAIL_MESSAGE,
    INVALID_PHONE_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    normalize_phone,
    validate_contact,
)
from booking_scheduler.domain.entities.contact import ContactDetails, NormalizedPhone

US = NormalizedPhone(display="(555) 123-4567", e164="+15551234567")


def test_ten_digit_us_number():
    assert normalize_phone("5551234567") == US


def test_eleven_digit_with_country_code():
    assert normalize_phone("15551234567") == US


def test_punctuation_is_ignored():
    assert normalize_phone(" (555) 123-4567 ") == US


def test_too_short_rejected():
    assert normalize_phone("555-123") is None
    assert normalize_phone("") is None


def test_too_long_rejected():
    assert normalize_phone("1234567890123456") is None


def test_international_passthrough():
    assert normalize_phone("+44 20 7946 0958") == NormalizedPhone(display="+442079460958", e164="+442079460958")


def test_plus_prefixed_ten_digits_not_treated_as_us():
    assert normalize_phone("+5551234567") == NormalizedPhone(display="+5551234567", e164="+5551234567")


def test_validate_contact_trims_and_formats_phone():
    contact = ContactDetails(
        name="  Ada Lovelace ",
        company="Engines Ltd",
        email="ada@example.com ",
        phone="5551234567",
        goals="  ",
    )

    validated, phone = validate_contact(contact)

    assert validated == ContactDetails(
        name="Ada Lovelace",
        company="Engines Ltd",
        email="ada@example.com",
        phone="(555) 123-4567",
        goals="",
    )
    assert phone.e164 == "+15551234567"


def test_validate_contact_missing_field():
    with pytest.raises(ContactValidationError) as exc:
        validate_contact(ContactDetails(name="", company="Co", email="a@b.co", phone="5551234567"))
    assert exc.value.field == "name"
    assert exc.value.message == MISSING_FIELDS_MESSAGE


def test_validate_contact_bad_phone():
    with pytest.raises(ContactValidationError) as exc:
        validate_contact(ContactDetails(name="A", company="Co", email="a@b.co", phone="555-123"))
    assert exc.value.field == "phone"
    assert exc.value.message == INVALID_PHONE_MESSAGE


def test_validate_contact_bad_email():
    with pytest.raises(ContactValidationError) as exc:
        validate_contact(ContactDetails(name="A", company="Co", email="not-an-email", phone="5551234567"))
    assert exc.value.message == INVALID_EMAIL_MESSAGE


def test_merged_with_only_fills_empty_fields():
    entered = ContactDetails(name="Typed Name", email="")
    prefill = ContactDetails(name="Prefilled", company="Prefill Co", email="pre@example.com")

    merged = entered.merged_with(prefill)

    assert merged.name == "Typed Name"
    assert merged.company == "Prefill Co"
    assert merged.email == "pre@example.com"
