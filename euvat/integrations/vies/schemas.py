"""Pydantic schemas for VIES checkVat results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Validity(str, Enum):
    """Tri-state outcome of a registry lookup."""

    VALID = "valid"
    INVALID = "invalid"
    UNKNOWN = "unknown"  # the lookup could not be completed


class ValidationResult(BaseModel):
    """Result from VIES (or cache)."""

    valid: Validity
    company_name: str | None = None
    company_address: str | None = None
    errors: list[str] = Field(default_factory=list)
    raw_response: dict[str, str] | None = None


class RequestRejected(BaseModel):
    """Arguments failed local checks; nothing was sent to VIES."""

    country_code: str
    vat_number: str
    errors: list[str]
