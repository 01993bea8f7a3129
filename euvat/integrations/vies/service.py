"""VAT validation service: orchestrates argument checks, cache and VIES client."""

from __future__ import annotations

import logging

import redis.asyncio as aioredis

from euvat.config import settings
from euvat.decoders.prefixes import PrefixTable, prefix_table
from euvat.decoders.vat_number import VatIdentifier, mask_number, parse_vat_number
from euvat.events import emit
from euvat.exceptions import InvalidNumberFormatError, UnknownCountryPrefixError
from euvat.integrations.vies.cache import ValidationCache
from euvat.integrations.vies.client import ViesClient
from euvat.integrations.vies.schemas import RequestRejected, ValidationResult, Validity
from euvat.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)


class VatValidationService:
    """Validate a VAT number for a country, using the cache when it can be trusted.

    Steps:
    1. Parse the number and resolve the country prefix; reject on any error
    2. Return a trusted cached result if there is one
    3. Otherwise ask VIES
    4. Cache the answer if, and only if, it is VALID (skipped in debug mode)
    """

    def __init__(
        self,
        cache: ValidationCache,
        client: ViesClient,
        *,
        prefixes: PrefixTable | None = None,
        debug_mode: bool = False,
    ) -> None:
        self._cache = cache
        self._client = client
        self._prefixes = prefixes or prefix_table
        self._debug_mode = debug_mode

    def _check_arguments(self, country_code: str, vat_number: str) -> VatIdentifier | list[str]:
        errors: list[str] = []
        number: str | None = None
        try:
            number = parse_vat_number(vat_number, self._prefixes.known_prefixes())
        except InvalidNumberFormatError as exc:
            errors.append(str(exc))

        prefix = self._prefixes.resolve(country_code)
        if not prefix:
            errors.append(str(UnknownCountryPrefixError(country_code)))

        if errors or number is None or prefix is None:
            return errors
        return VatIdentifier(
            raw_input=vat_number,
            country_code=country_code,
            prefix=prefix,
            canonical_number=number,
        )

    async def validate(self, country_code: str, vat_number: str) -> ValidationResult | RequestRejected:
        checked = self._check_arguments(country_code, vat_number)
        if isinstance(checked, list):
            logger.info("Rejected VAT validation request for country %r", country_code)
            await emit(SystemEvent(
                event_type=EventType.VAT_VALIDATION_REJECTED,
                data={"country_code": country_code, "errors": len(checked)},
                source_module="integrations.vies.service",
            ))
            return RequestRejected(country_code=country_code, vat_number=vat_number, errors=checked)

        identifier = checked
        logger.debug("Validating %s", mask_number(identifier.full_number))
        await emit(SystemEvent(
            event_type=EventType.VAT_VALIDATION_REQUESTED,
            data={"prefix": identifier.prefix, "vat_number": mask_number(identifier.canonical_number)},
            source_module="integrations.vies.service",
        ))

        cached = await self._cache.get(identifier.prefix, identifier.canonical_number)
        if cached is not None:
            logger.debug("VAT cache hit: %s", mask_number(identifier.full_number))
            await emit(SystemEvent(
                event_type=EventType.VAT_CACHE_HIT,
                data={"prefix": identifier.prefix},
                source_module="integrations.vies.service",
            ))
            return cached

        result = await self._client.check_vat(identifier.prefix, identifier.canonical_number)

        if result.valid is Validity.VALID and not self._debug_mode:
            await self._cache.put(identifier.prefix, identifier.canonical_number, result)

        await emit(SystemEvent(
            event_type=EventType.VAT_VALIDATION_COMPLETED,
            data={"prefix": identifier.prefix, "valid": result.valid.value},
            source_module="integrations.vies.service",
        ))
        return result


def build_service(redis: aioredis.Redis, *, debug_mode: bool | None = None) -> VatValidationService:
    """Wire cache, client and prefix table from settings."""
    debug = settings.vies.debug_mode if debug_mode is None else debug_mode
    cache = ValidationCache(redis, debug_mode=debug)
    client = ViesClient(cache, debug_mode=debug)
    return VatValidationService(cache, client, debug_mode=debug)


async def validate_vat_number(
    country_code: str,
    vat_number: str,
    redis: aioredis.Redis,
) -> ValidationResult | RequestRejected:
    """Validate a VAT number with the configured cache, client and prefixes."""
    return await build_service(redis).validate(country_code, vat_number)
