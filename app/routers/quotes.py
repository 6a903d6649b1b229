import logging

from fastapi import APIRouter

from app.dependencies import PricingDep
from app.schemas.pricing import QuoteParams, QuoteResult
from app.schemas.responses import SavedQuoteResponse, SaveQuoteRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes")


@router.post("", response_model=QuoteResult)
async def calculate_quote(params: QuoteParams, service: PricingDep) -> QuoteResult:
    return await service.calculate_quote(params)


@router.post("/requests", response_model=SavedQuoteResponse, status_code=201)
async def save_quote_request(
    request: SaveQuoteRequest, service: PricingDep
) -> SavedQuoteResponse:
    quote = await service.calculate_quote(request.params)
    quote_id = await service.save_quote(request.params, quote, request.contact)
    logger.info("Quote request %s stored (final_total=%d)", quote_id, quote.final_total)
    return SavedQuoteResponse(id=quote_id, quote=quote)
