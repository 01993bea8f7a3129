"""FastAPI application entry point.

Usage:
    python -m euvat.main
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from euvat import __version__
from euvat.api import router as vat_router
from euvat.audit import audit_on_event
from euvat.config import settings
from euvat.events import emit, start_event_system, stop_event_system, subscribe
from euvat.schemas.events import EventType, SystemEvent
from euvat.store import store_lifespan

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting euvat (env=%s, debug_mode=%s)", settings.environment, settings.vies.debug_mode)

    async with store_lifespan():
        logger.info("Redis connected")

        subscribe(audit_on_event)
        await start_event_system()
        await emit(SystemEvent(event_type=EventType.SYSTEM_STARTUP, source_module="main"))

        try:
            yield
        finally:
            logger.info("Shutting down euvat...")
            await emit(SystemEvent(event_type=EventType.SYSTEM_SHUTDOWN, source_module="main"))
            await stop_event_system()

    logger.info("euvat shutdown complete")


# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title="euvat",
    description="EU VAT number validation against VIES",
    version=__version__,
    lifespan=lifespan,
)
app.include_router(vat_router)


@app.get("/health")
async def health_check() -> dict[str, str | bool]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "debug_mode": settings.vies.debug_mode,
    }


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "euvat.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
