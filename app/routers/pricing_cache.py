from fastapi import APIRouter

from app.dependencies import PricingDep
from app.schemas.responses import CacheInvalidationRequest, CacheInvalidationResponse

router = APIRouter(prefix="/pricing")


@router.post("/cache/invalidate", response_model=CacheInvalidationResponse)
async def invalidate_cache(
    service: PricingDep,
    request: CacheInvalidationRequest | None = None,
) -> CacheInvalidationResponse:
    pattern = request.pattern if request else None
    return CacheInvalidationResponse(removed=service.invalidate_cache(pattern))
