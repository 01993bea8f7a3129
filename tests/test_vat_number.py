"""Tests for VAT number normalization.

Covers:
- Formatting characters (space, hyphen, underscore, period) removed
- Uppercasing
- Embedded known prefix stripped, unknown pairs kept
- Empty input rejected
- Idempotence, and the documented double-prefix edge case
"""

from __future__ import annotations

import pytest

from euvat.config import EU_VAT_COUNTRIES
from euvat.decoders.prefixes import PrefixTable
from euvat.decoders.vat_number import (
    VatIdentifier,
    mask_number,
    normalize_vat_number,
    parse_vat_number,
)
from euvat.exceptions import InvalidNumberFormatError

KNOWN = PrefixTable(EU_VAT_COUNTRIES).known_prefixes()


class TestNormalize:
    def test_strips_formatting(self) -> None:
        assert normalize_vat_number(" 12.345-678_9 ") == "123456789"

    def test_uppercases(self) -> None:
        assert normalize_vat_number("nl123456789b01") == "NL123456789B01"


class TestParseVatNumber:
    def test_plain_digits(self) -> None:
        assert parse_vat_number("123456789", KNOWN) == "123456789"

    def test_embedded_prefix_stripped(self) -> None:
        assert parse_vat_number("DE123456789", KNOWN) == "123456789"

    def test_lowercase_prefix_stripped(self) -> None:
        assert parse_vat_number("de 123 456 789", KNOWN) == "123456789"

    def test_greek_prefix_is_el(self) -> None:
        assert parse_vat_number("EL-094014201", KNOWN) == "094014201"

    def test_country_code_that_is_not_a_prefix_is_kept(self) -> None:
        # GR maps to EL, so GR is not a prefix value
        assert parse_vat_number("GR094014201", KNOWN) == "GR094014201"

    def test_embedded_prefix_of_another_country_stripped(self) -> None:
        assert parse_vat_number("FR40303265045", KNOWN) == "40303265045"

    def test_alphanumeric_kept(self) -> None:
        assert parse_vat_number("ATU12345678", KNOWN) == "U12345678"

    def test_non_ascii_kept(self) -> None:
        assert parse_vat_number("ÄB12", KNOWN) == "ÄB12"

    @pytest.mark.parametrize("raw", ["", "   ", " - . _ ", "DE", "de", "EL."])
    def test_empty_after_normalization(self, raw: str) -> None:
        with pytest.raises(InvalidNumberFormatError) as exc_info:
            parse_vat_number(raw, KNOWN)
        assert exc_info.value.raw_input == raw
        assert "empty or invalid VAT number" in str(exc_info.value)

    @pytest.mark.parametrize("raw", ["DE 123 456 789", "123456789", "nl-8574.05.384B01", "U12345678"])
    def test_idempotent(self, raw: str) -> None:
        once = parse_vat_number(raw, KNOWN)
        assert parse_vat_number(once, KNOWN) == once

    def test_double_prefix_edge_case(self) -> None:
        # Only the first pair is stripped; re-submitting strips again.
        once = parse_vat_number("ITIT123", KNOWN)
        assert once == "IT123"
        assert parse_vat_number(once, KNOWN) == "123"


class TestMaskNumber:
    def test_keeps_first_four(self) -> None:
        assert mask_number("123456789") == "1234XXXXX"

    def test_short_numbers_unchanged(self) -> None:
        assert mask_number("123") == "123"


class TestVatIdentifier:
    def test_full_number(self) -> None:
        identifier = VatIdentifier(
            raw_input="gr 094014201",
            country_code="GR",
            prefix="EL",
            canonical_number="094014201",
        )
        assert identifier.full_number == "EL094014201"
