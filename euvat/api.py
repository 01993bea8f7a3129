"""VAT validation HTTP routes."""
# ruff: noqa: B008

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from euvat.decoders.prefixes import prefix_table
from euvat.integrations.vies.schemas import RequestRejected, ValidationResult
from euvat.integrations.vies.service import VatValidationService, build_service
from euvat.store import get_redis

router = APIRouter(prefix="/vat", tags=["vat"])


async def get_validation_service(redis: aioredis.Redis = Depends(get_redis)) -> VatValidationService:
    return build_service(redis)


@router.get("/prefixes")
async def list_prefixes() -> dict[str, str]:
    """Current country code → VAT prefix map."""
    return dict(prefix_table.prefixes)


@router.get("/{country_code}/{vat_number}", response_model=ValidationResult)
async def validate(
    country_code: str,
    vat_number: str,
    service: VatValidationService = Depends(get_validation_service),
) -> ValidationResult | JSONResponse:
    result = await service.validate(country_code, vat_number)
    if isinstance(result, RequestRejected):
        return JSONResponse(status_code=422, content={"errors": result.errors})
    return result
