"""Testes de normalização de telefone (utils/phone.py)."""

from __future__ import annotations

import pytest

from utils.phone import (
    country_code_of,
    format_phone_number,
    is_valid_phone_number,
    mask_phone,
    strip_channel_prefix,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("whatsapp:+34600000001", "+34600000001"),
        ("+34 600 00 00 01", "+34600000001"),
        ("600000001", "+34600000001"),
        ("0034600000001", "+34600000001"),
        ("34600000001", "+34600000001"),
        ("+3434600000001", "+34600000001"),
        ("+1 (415) 555-0100", "+14155550100"),
    ],
)
def test_format_phone_number_to_e164(raw: str, expected: str) -> None:
    assert format_phone_number(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "+34 123", "whatsapp:"])
def test_format_phone_number_rejects_invalid(raw: str | None) -> None:
    assert format_phone_number(raw) is None


def test_format_phone_number_uses_default_country() -> None:
    assert format_phone_number("5512345678", default_country="+52") == "+525512345678"


def test_strip_channel_prefix_is_case_insensitive() -> None:
    assert strip_channel_prefix("WhatsApp:+34600000001") == "+34600000001"


def test_is_valid_phone_number_country_rules() -> None:
    assert is_valid_phone_number("+34600000001")
    assert not is_valid_phone_number("+34500000001")
    assert is_valid_phone_number("+447700900123")


def test_country_code_of() -> None:
    assert country_code_of("+14155550100") == "+1"
    assert country_code_of("+34600000001") == "+34"
    assert country_code_of("+447700900123") is None


def test_mask_phone_keeps_last_digits() -> None:
    assert mask_phone("+34600000001") == "***0001"
    assert mask_phone(None) == ""
