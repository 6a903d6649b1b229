from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query

from app.dependencies import PricingDep
from app.schemas.pricing import ReservedInterval
from app.schemas.responses import AvailabilityResponse

router = APIRouter(prefix="/availability")


def _check_period(check_in: date, check_out: date) -> None:
    if check_in >= check_out:
        raise HTTPException(status_code=400, detail="check_in must be before check_out")


@router.get("", response_model=AvailabilityResponse)
async def check_availability(
    unit_ids: Annotated[list[int], Query(min_length=1)],
    check_in: date,
    check_out: date,
    service: PricingDep,
) -> AvailabilityResponse:
    _check_period(check_in, check_out)
    units = await service.check_multiple_availability(unit_ids, check_in, check_out)
    return AvailabilityResponse(check_in=check_in, check_out=check_out, units=units)


@router.get("/{unit_id}/conflicts", response_model=list[ReservedInterval])
async def list_conflicts(
    unit_id: int,
    check_in: date,
    check_out: date,
    service: PricingDep,
) -> list[ReservedInterval]:
    _check_period(check_in, check_out)
    return await service.availability_conflicts(unit_id, check_in, check_out)
