"""VAT number normalization.

Pure Python: no I/O. Turns free-form user input ("de 123.456-789") into the
canonical number the registry expects ("123456789"):
  1. drop spaces, hyphens, underscores and periods
  2. uppercase
  3. drop a leading two-character VAT prefix, if it is a known one

The caller-supplied country code decides which prefix is sent; an embedded
prefix is discarded, not trusted.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from euvat.exceptions import InvalidNumberFormatError

_FORMATTING_CHARS = str.maketrans("", "", " -_.")


@dataclass(frozen=True)
class VatIdentifier:
    """A validated request: what was typed, and what will be sent."""

    raw_input: str
    country_code: str
    prefix: str
    canonical_number: str

    @property
    def full_number(self) -> str:
        return f"{self.prefix}{self.canonical_number}"


def normalize_vat_number(raw: str) -> str:
    """Strip formatting characters and uppercase."""
    return raw.translate(_FORMATTING_CHARS).upper()


def parse_vat_number(raw: str, known_prefixes: Collection[str]) -> str:
    """Return the canonical VAT number for ``raw``.

    Only the first two characters are checked against ``known_prefixes``, and
    only once. A number whose own digits start with a prefix-shaped pair is
    therefore truncated if it is submitted with its prefix already removed.

    Raises:
        InvalidNumberFormatError: nothing is left after normalization.
    """
    number = normalize_vat_number(raw)
    if number[:2] in known_prefixes:
        number = number[2:]
    if not number:
        raise InvalidNumberFormatError(raw)
    return number


def mask_number(number: str) -> str:
    """Keep the first four characters for logs and events, mask the rest."""
    return number[:4] + "X" * max(len(number) - 4, 0)
