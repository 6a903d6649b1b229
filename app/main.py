import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.cache import ResultCache
from app.config import Settings
from app.exceptions.custom import (
    PricingDataMissingError,
    RateLimitError,
    SupabaseError,
    UnitUnavailableError,
)
from app.exceptions.handlers import (
    pricing_data_missing_error_handler,
    rate_limit_error_handler,
    supabase_error_handler,
    unit_unavailable_error_handler,
)
from app.routers.availability import router as availability_router
from app.routers.pricing_cache import router as pricing_cache_router
from app.routers.quotes import router as quotes_router
from app.services.pricing import PricingService
from app.services.supabase import SupabaseService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        supabase = SupabaseService(client, settings.supabase_url, settings.supabase_key)
        cache = ResultCache(ttl_seconds=settings.cache_ttl_seconds)

        app.state.pricing_service = PricingService(supabase, cache)

        yield


app = FastAPI(title="Vacation Rental Pricing", lifespan=lifespan)

app.add_exception_handler(UnitUnavailableError, unit_unavailable_error_handler)
app.add_exception_handler(PricingDataMissingError, pricing_data_missing_error_handler)
app.add_exception_handler(RateLimitError, rate_limit_error_handler)
app.add_exception_handler(SupabaseError, supabase_error_handler)

app.include_router(quotes_router)
app.include_router(availability_router)
app.include_router(pricing_cache_router)
