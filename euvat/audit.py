"""Audit log subscriber: writes every SystemEvent to a structlog logger.

Registered as a global subscriber (receives ALL events). Never raises:
failures are logged but never propagate to the event system.
"""

from __future__ import annotations

import logging

import structlog

from euvat.schemas.events import SystemEvent

logger = logging.getLogger(__name__)
audit_logger = structlog.get_logger("euvat.audit")


async def audit_on_event(event: SystemEvent) -> None:
    """Log a SystemEvent with its payload as structured key/values."""
    try:
        audit_logger.info(
            event.event_type.value,
            event_id=str(event.id),
            source=event.source_module,
            **event.data,
        )
    except Exception:
        logger.exception("Failed to write audit event: %s", event.event_type.value)
