"""Shared Redis client and lifespan management.

Redis backs both TTL caches: validation results and the VIES WSDL document.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator

import redis.asyncio as aioredis

from euvat.config import settings

redis_client: aioredis.Redis = aioredis.from_url(
    settings.redis.redis_url,
    decode_responses=True,
)


async def get_redis() -> aioredis.Redis:
    """Dependency for FastAPI: returns the shared Redis client."""
    return redis_client


async def close_store() -> None:
    """Close Redis connections. Called during FastAPI lifespan shutdown."""
    await redis_client.aclose()


@contextlib.asynccontextmanager
async def store_lifespan() -> AsyncGenerator[None, None]:
    """Verify Redis connectivity on startup and close the pool on shutdown.

    Usage in FastAPI lifespan:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with store_lifespan():
                yield
    """
    await redis_client.ping()
    try:
        yield
    finally:
        await close_store()
