from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from app.schemas.pricing import QuoteContact, QuoteParams, QuoteResult


class SaveQuoteRequest(BaseModel):
    params: QuoteParams
    contact: QuoteContact | None = None


class SavedQuoteResponse(BaseModel):
    id: int
    quote: QuoteResult


class AvailabilityResponse(BaseModel):
    check_in: date
    check_out: date
    units: dict[int, bool]


class CacheInvalidationRequest(BaseModel):
    pattern: str | None = None


class CacheInvalidationResponse(BaseModel):
    removed: int
