import asyncio
import logging
from datetime import date
from enum import StrEnum

from app.cache import ResultCache, cache_key
from app.exceptions.custom import (
    BackendQueryError,
    PricingDataMissingError,
    UnitUnavailableError,
)
from app.mappers.extras import compute_extras
from app.mappers.guest_distribution import distribute_guests
from app.mappers.occupancy_discount import compute_discount_percent
from app.mappers.price_rounding import round_down
from app.mappers.rate_table import resolve_period_price, stay_years
from app.schemas.pricing import (
    DiscountType,
    PerUnitQuoteLine,
    QuoteContact,
    QuoteParams,
    QuoteResult,
    RentalUnit,
    ReservedInterval,
)
from app.services.supabase import PricingBackend

logger = logging.getLogger(__name__)

DEPOSIT_PERCENT = 30


class QuoteStage(StrEnum):
    checking_availability = "checking-availability"
    pricing_units = "pricing-units"
    aggregating_extras = "aggregating-extras"
    rounding = "rounding"
    done = "done"
    failed = "failed"


def compute_deposit(final_total: int) -> int:
    return round_down(final_total * DEPOSIT_PERCENT / 100)


def classify_discount(
    discount_total: int, lines: list[PerUnitQuoteLine]
) -> DiscountType:
    if discount_total == 0:
        return DiscountType.none
    if any(line.occupied_beds < line.unit.capacity for line in lines):
        return DiscountType.occupancy
    return DiscountType.courtesy


class PricingService:
    def __init__(self, backend: PricingBackend, cache: ResultCache):
        self._backend = backend
        self._cache = cache

    async def get_unit(self, unit_id: int) -> RentalUnit:
        return await self._cache.get_or_compute(
            cache_key("apartment", unit_id),
            lambda: self._backend.fetch_unit(unit_id),
        )

    async def price_for_period(
        self, unit_id: int, check_in: date, check_out: date
    ) -> int:
        """Base price of a stay: price/7 per night from the covering weekly bucket."""
        if check_in >= check_out:
            raise ValueError("check_in must be before check_out")

        async def _compute() -> int:
            buckets = await self._backend.fetch_rate_buckets(
                unit_id, stay_years(check_in, check_out), check_in, check_out
            )
            price, missing = resolve_period_price(buckets, check_in, check_out)
            if missing:
                raise PricingDataMissingError(unit_id, check_in, check_out, missing)
            return price

        return await self._cache.get_or_compute(
            cache_key("price", unit_id, check_in.isoformat(), check_out.isoformat()),
            _compute,
        )

    async def is_available(
        self, unit_id: int, check_in: date, check_out: date
    ) -> bool:
        async def _compute() -> bool:
            conflicts = await self._backend.fetch_conflicting_intervals(
                unit_id, check_in, check_out
            )
            return not any(c.overlaps(check_in, check_out) for c in conflicts)

        try:
            return await self._cache.get_or_compute(
                cache_key(
                    "availability", unit_id, check_in.isoformat(), check_out.isoformat()
                ),
                _compute,
            )
        except BackendQueryError as exc:
            # Fail open: a backend error reports the unit as available so that
            # transient outages never block a quote. This can double-book under a
            # sustained outage; the answer is not cached.
            logger.warning(
                "Availability check failed for unit %s (%s - %s), assuming available: %s",
                unit_id,
                check_in,
                check_out,
                exc.message,
            )
            return True

    async def check_multiple_availability(
        self, unit_ids: list[int], check_in: date, check_out: date
    ) -> dict[int, bool]:
        results = await asyncio.gather(
            *(self.is_available(uid, check_in, check_out) for uid in unit_ids)
        )
        return dict(zip(unit_ids, results))

    async def availability_conflicts(
        self, unit_id: int, check_in: date, check_out: date
    ) -> list[ReservedInterval]:
        conflicts = await self._backend.fetch_conflicting_intervals(
            unit_id, check_in, check_out
        )
        return [c for c in conflicts if c.overlaps(check_in, check_out)]

    async def calculate_quote(self, params: QuoteParams) -> QuoteResult:
        """Full quote for one or more units.

        Availability is resolved for every unit before any pricing work. Any
        failure aborts the whole quote; nothing partial is returned.
        """
        stage = QuoteStage.checking_availability
        try:
            logger.debug("Quote stage -> %s", stage)
            availability = await self.check_multiple_availability(
                params.units, params.check_in, params.check_out
            )
            unavailable = [uid for uid, ok in availability.items() if not ok]
            if unavailable:
                raise UnitUnavailableError(unavailable, params.check_in, params.check_out)

            stage = QuoteStage.pricing_units
            logger.debug("Quote stage -> %s", stage)
            lines = await self._price_units(params)
            base_total = sum(line.base_price for line in lines)
            occupancy_discount = sum(line.discount_amount for line in lines)

            stage = QuoteStage.aggregating_extras
            logger.debug("Quote stage -> %s", stage)
            extras_total = compute_extras(
                params.has_pet, params.needs_linen, params.guests_in_beds
            )

            stage = QuoteStage.rounding
            logger.debug("Quote stage -> %s", stage)
            subtotal = round(base_total - occupancy_discount + extras_total, 2)
            final_total = round_down(subtotal)
            # Rounding residual is reported as discount so the totals reconcile.
            discount_total = base_total + extras_total - final_total
            deposit = compute_deposit(final_total)
        except Exception as exc:
            failed_at, stage = stage, QuoteStage.failed
            logger.warning(
                "Quote stage -> %s during %s for units %s (%s - %s): %s",
                stage,
                failed_at,
                params.units,
                params.check_in,
                params.check_out,
                exc,
            )
            raise

        result = QuoteResult(
            lines=lines,
            nights=params.nights,
            base_total=base_total,
            discount_total=discount_total,
            discount_type=classify_discount(discount_total, lines),
            extras_total=extras_total,
            final_total=final_total,
            deposit=deposit,
            balance=final_total - deposit,
        )
        logger.debug("Quote stage -> %s", QuoteStage.done)
        logger.info(
            "Quote for units %s (%s - %s): base=%d discount=%d extras=%d final=%d",
            params.units,
            params.check_in,
            params.check_out,
            base_total,
            discount_total,
            extras_total,
            final_total,
        )
        return result

    async def _price_units(self, params: QuoteParams) -> list[PerUnitQuoteLine]:
        units, prices = await asyncio.gather(
            asyncio.gather(*(self.get_unit(uid) for uid in params.units)),
            asyncio.gather(
                *(
                    self.price_for_period(uid, params.check_in, params.check_out)
                    for uid in params.units
                )
            ),
        )
        capacities = {unit_id: unit.capacity for unit_id, unit in zip(params.units, units)}

        lines: list[PerUnitQuoteLine] = []
        for unit_id, unit, base_price in zip(params.units, units, prices):
            occupied_beds = distribute_guests(
                params.guests_in_beds, capacities, target_unit_id=unit_id
            )
            discount_percent = compute_discount_percent(occupied_beds, unit.capacity)
            discount_amount = round(base_price * discount_percent / 100, 2)
            lines.append(
                PerUnitQuoteLine(
                    unit_id=unit_id,
                    unit=unit,
                    base_price=base_price,
                    occupied_beds=occupied_beds,
                    discount_percent=discount_percent,
                    discount_amount=discount_amount,
                    final_price=base_price - discount_amount,
                )
            )
        return lines

    def invalidate_cache(self, pattern: str | None = None) -> int:
        return self._cache.invalidate(pattern)

    async def save_quote(
        self,
        params: QuoteParams,
        result: QuoteResult,
        contact: QuoteContact | None = None,
    ) -> int:
        return await self._backend.save_quote_request(params, result, contact)
