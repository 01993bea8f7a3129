"""Country code → VIES VAT prefix table.

The registry expects a two-letter prefix in front of each VAT number. It is
usually the ISO country code, with a few exceptions:
  - Greece uses "EL" instead of "GR"
  - the Isle of Man is registered under the United Kingdom ("GB")
  - Monaco is registered under France ("FR")

The base table is built once per process. Filters are applied on every read,
so extra entries can be layered on without rebuilding the base.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import lru_cache
from types import MappingProxyType

from euvat.config import settings

# Filters receive a mutable copy of the table and return the table to use.
PrefixFilter = Callable[[dict[str, str]], Mapping[str, str]]

PREFIX_CORRECTIONS: dict[str, str] = {
    "GR": "EL",
    "IM": "GB",
    "MC": "FR",
}


@lru_cache(maxsize=8)
def build_base_prefixes(countries: tuple[str, ...]) -> Mapping[str, str]:
    """Map each eligible country to itself, then apply the fixed corrections."""
    prefixes = {code: code for code in countries}
    prefixes.update(PREFIX_CORRECTIONS)
    return MappingProxyType(prefixes)


def overrides_filter(overrides: Mapping[str, str]) -> PrefixFilter:
    """Return a filter that adds or replaces entries with ``overrides``."""
    frozen = dict(overrides)

    def _apply(prefixes: dict[str, str]) -> Mapping[str, str]:
        prefixes.update(frozen)
        return prefixes

    return _apply


class PrefixTable:
    """Read-only view over the base prefixes plus any configured filters."""

    def __init__(self, countries: Iterable[str], filters: Sequence[PrefixFilter] = ()) -> None:
        self._countries = tuple(countries)
        self._filters = tuple(filters)

    def with_filter(self, prefix_filter: PrefixFilter) -> PrefixTable:
        """Return a new table with ``prefix_filter`` applied after the existing ones."""
        return PrefixTable(self._countries, (*self._filters, prefix_filter))

    @property
    def prefixes(self) -> Mapping[str, str]:
        table: Mapping[str, str] = build_base_prefixes(self._countries)
        for prefix_filter in self._filters:
            table = prefix_filter(dict(table))
        return MappingProxyType(dict(table))

    def known_prefixes(self) -> frozenset[str]:
        """Distinct prefix values across all countries."""
        return frozenset(self.prefixes.values())

    def resolve(self, country_code: str) -> str | None:
        """Return the VAT prefix for ``country_code``, or None if unknown."""
        return self.prefixes.get(country_code.strip().upper())


def _default_filters() -> list[PrefixFilter]:
    if settings.vies.prefix_overrides:
        return [overrides_filter(settings.vies.prefix_overrides)]
    return []


# Module-level singleton
prefix_table = PrefixTable(settings.vies.vat_countries, _default_filters())


def resolve_prefix(country_code: str, table: PrefixTable | None = None) -> str | None:
    """Resolve a country code against ``table`` (the configured table by default)."""
    return (table or prefix_table).resolve(country_code)
