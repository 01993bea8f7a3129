"""Redis-backed caches for VIES lookups.

Two independent namespaces:
  - validation results, key "euvat:result:{prefix}{number}", 1 hour TTL,
    valid results only
  - the checkVat WSDL document, key "euvat:vies_wsdl", 60 second TTL

A cached result is trusted only if it deserializes into a ValidationResult
whose validity is VALID. Anything else is a miss. Older entries written with
a different shape must never be read back as a negative answer.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError

from euvat.config import settings
from euvat.decoders.vat_number import mask_number
from euvat.integrations.vies.schemas import ValidationResult, Validity

logger = logging.getLogger(__name__)

RESULT_KEY_PREFIX = "euvat:result:"
WSDL_CACHE_KEY = "euvat:vies_wsdl"


def result_cache_key(prefix: str, number: str) -> str:
    return f"{RESULT_KEY_PREFIX}{prefix}{number}"


def trusted_cached_result(cached: object) -> ValidationResult | None:
    """Apply the cached-response filter. Returns the result, or None for a miss."""
    if not cached:
        return None
    if isinstance(cached, ValidationResult):
        result = cached
    elif isinstance(cached, (str, bytes)):
        try:
            result = ValidationResult.model_validate_json(cached)
        except ValidationError:
            logger.warning("Discarding malformed cached VAT result")
            return None
    else:
        return None
    if result.valid is not Validity.VALID:
        return None
    return result


class ValidationCache:
    """Result and WSDL caches over a TTL-capable Redis store.

    In debug mode result reads always miss and result writes are skipped.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        *,
        debug_mode: bool = False,
        result_ttl: int | None = None,
        wsdl_ttl: int | None = None,
    ) -> None:
        self._redis = redis
        self.debug_mode = debug_mode
        self._result_ttl = result_ttl if result_ttl is not None else settings.vies.result_cache_ttl
        self._wsdl_ttl = wsdl_ttl if wsdl_ttl is not None else settings.vies.wsdl_cache_ttl

    # ── Validation results ───────────────────────────────────────────

    async def get(self, prefix: str, number: str) -> ValidationResult | None:
        if self.debug_mode:
            return None
        try:
            cached = await self._redis.get(result_cache_key(prefix, number))
        except RedisError:
            logger.warning("VAT result cache read failed for %s%s", prefix, mask_number(number))
            return None
        return trusted_cached_result(cached)

    async def put(self, prefix: str, number: str, result: ValidationResult) -> None:
        if self.debug_mode:
            return
        try:
            await self._redis.setex(
                result_cache_key(prefix, number),
                self._result_ttl,
                result.model_dump_json(),
            )
        except RedisError:
            logger.warning("Failed to cache VAT result for %s%s", prefix, mask_number(number))

    # ── WSDL document ────────────────────────────────────────────────

    async def get_wsdl(self) -> str | None:
        try:
            cached = await self._redis.get(WSDL_CACHE_KEY)
        except RedisError:
            logger.warning("WSDL cache read failed")
            return None
        if isinstance(cached, bytes):
            return cached.decode("utf-8", errors="replace")
        return cached or None

    async def put_wsdl(self, document: str) -> None:
        try:
            await self._redis.setex(WSDL_CACHE_KEY, self._wsdl_ttl, document)
        except RedisError:
            logger.warning("Failed to cache WSDL document")
