import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import (
    PricingDataMissingError,
    RateLimitError,
    SupabaseError,
    UnitUnavailableError,
)

logger = logging.getLogger(__name__)


async def unit_unavailable_error_handler(
    _request: Request, exc: UnitUnavailableError
) -> JSONResponse:
    logger.info("Units unavailable: %s", exc.unit_ids)
    return JSONResponse(
        status_code=409,
        content={
            "detail": "Dates unavailable for the selected apartments",
            "unit_ids": exc.unit_ids,
        },
    )


async def pricing_data_missing_error_handler(
    _request: Request, exc: PricingDataMissingError
) -> JSONResponse:
    logger.error(
        "Pricing calendar gap: %s (missing nights: %s)",
        exc.message,
        [d.isoformat() for d in exc.missing_nights],
    )
    return JSONResponse(
        status_code=422,
        content={
            "detail": "No price available for the selected period",
            "unit_id": exc.unit_id,
        },
    )


async def supabase_error_handler(_request: Request, exc: SupabaseError) -> JSONResponse:
    logger.error("Supabase error: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": "Backend temporarily unavailable, please try again"},
    )


async def rate_limit_error_handler(_request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning("Rate limit hit for %s", exc.service)
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded for {exc.service}"},
    )
