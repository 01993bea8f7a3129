"""SystemEvent schema: emitted at each step of a VAT validation.

Subscribers (the audit logger, anything registered at startup) consume these
events asynchronously.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """All event types emitted by the system."""

    # Validation pipeline
    VAT_VALIDATION_REQUESTED = "vat.validation_requested"
    VAT_VALIDATION_REJECTED = "vat.validation_rejected"
    VAT_CACHE_HIT = "vat.cache_hit"
    VAT_VALIDATION_COMPLETED = "vat.validation_completed"

    # Registry
    VIES_WSDL_FETCHED = "vies.wsdl_fetched"
    EXTERNAL_API_CALL = "external_api.call"
    EXTERNAL_API_RESPONSE = "external_api.response"

    # System
    SYSTEM_STARTUP = "system.startup"
    SYSTEM_SHUTDOWN = "system.shutdown"


class SystemEvent(BaseModel):
    """Immutable record of something that happened during a validation."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Flexible payload
    data: dict[str, Any] = Field(default_factory=dict)

    # Metadata
    source_module: str | None = Field(default=None, description="Module that emitted this event")

    model_config = {"frozen": True}
