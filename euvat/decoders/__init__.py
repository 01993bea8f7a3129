"""Deterministic VAT decoders: prefix table and VAT number parsing."""

from euvat.decoders.prefixes import PrefixTable, prefix_table, resolve_prefix
from euvat.decoders.vat_number import (
    VatIdentifier,
    mask_number,
    normalize_vat_number,
    parse_vat_number,
)

__all__ = [
    "PrefixTable",
    "VatIdentifier",
    "mask_number",
    "normalize_vat_number",
    "parse_vat_number",
    "prefix_table",
    "resolve_prefix",
]
