from typing import Annotated

from fastapi import Depends, Request

from app.services.pricing import PricingService


def get_pricing_service(request: Request) -> PricingService:
    return request.app.state.pricing_service


PricingDep = Annotated[PricingService, Depends(get_pricing_service)]
