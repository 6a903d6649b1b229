import asyncio
import json
import logging
from datetime import date
from typing import Any, Protocol

import httpx

from app.exceptions.custom import RateLimitError, SupabaseError
from app.schemas.pricing import (
    IntervalKind,
    QuoteContact,
    QuoteParams,
    QuoteResult,
    RentalUnit,
    ReservedInterval,
    WeeklyRateBucket,
)

logger = logging.getLogger(__name__)

UNIT_SLUG_PREFIX = "appartamento-"

APARTMENTS_TABLE = "apartments"
WEEKLY_PRICES_TABLE = "weekly_prices"
RESERVATIONS_TABLE = "reservations"
DATE_BLOCKS_TABLE = "date_blocks"
QUOTE_REQUESTS_TABLE = "quote_requests"


def unit_slug(unit_id: int) -> str:
    """Price and reservation rows reference units as ``appartamento-<id>``."""
    return f"{UNIT_SLUG_PREFIX}{unit_id}"


class PricingBackend(Protocol):
    async def fetch_unit(self, unit_id: int) -> RentalUnit: ...

    async def fetch_rate_buckets(
        self,
        unit_id: int,
        years: list[int],
        check_in: date | None = None,
        check_out: date | None = None,
    ) -> list[WeeklyRateBucket]: ...

    async def fetch_conflicting_intervals(
        self, unit_id: int, check_in: date, check_out: date
    ) -> list[ReservedInterval]: ...

    async def save_quote_request(
        self,
        params: QuoteParams,
        result: QuoteResult,
        contact: QuoteContact | None = None,
    ) -> int: ...


class SupabaseService:
    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: str):
        self._client = client
        self._rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def table_url(self, table: str) -> str:
        return f"{self._rest_url}/{table}"

    async def _request(
        self,
        method: str,
        table: str,
        params: list[tuple[str, str]] | None = None,
        payload: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            resp = await self._client.request(
                method,
                self.table_url(table),
                params=params,
                json=payload,
                headers={**self._headers, **(headers or {})},
            )
        except httpx.HTTPError as exc:
            logger.warning("Supabase %s %s failed: %r", method, table, exc)
            raise SupabaseError(f"Supabase request to {table} failed: {exc!r}") from exc

        if resp.status_code == 429:
            raise RateLimitError("Supabase")
        if resp.status_code >= 400:
            raise SupabaseError(resp.text, status_code=resp.status_code)

        return resp.json()

    async def fetch_unit(self, unit_id: int) -> RentalUnit:
        rows = await self._request(
            "GET",
            APARTMENTS_TABLE,
            params=[("select", "*"), ("id", f"eq.{unit_id}")],
        )
        if not rows:
            raise SupabaseError(f"Apartment {unit_id} not found", status_code=404)

        logger.debug("Fetched apartment %s", unit_id)
        return RentalUnit(**rows[0])

    async def fetch_rate_buckets(
        self,
        unit_id: int,
        years: list[int],
        check_in: date | None = None,
        check_out: date | None = None,
    ) -> list[WeeklyRateBucket]:
        params = [
            ("select", "*"),
            ("apartment_id", f"eq.{unit_slug(unit_id)}"),
            ("year", f"in.({','.join(str(y) for y in sorted(set(years)))})"),
        ]
        if check_in is not None:
            params.append(("week_end", f"gte.{check_in.isoformat()}"))
        if check_out is not None:
            params.append(("week_start", f"lte.{check_out.isoformat()}"))
        params.append(("order", "week_start"))

        rows = await self._request("GET", WEEKLY_PRICES_TABLE, params=params)
        logger.debug("Fetched %d weekly prices for apartment %s", len(rows), unit_id)
        return [WeeklyRateBucket(**row) for row in rows]

    async def fetch_conflicting_intervals(
        self, unit_id: int, check_in: date, check_out: date
    ) -> list[ReservedInterval]:
        reservations, blocks = await asyncio.gather(
            self._fetch_conflicting_reservations(unit_id, check_in, check_out),
            self._fetch_conflicting_blocks(unit_id, check_in, check_out),
        )
        return reservations + blocks

    async def _fetch_conflicting_reservations(
        self, unit_id: int, check_in: date, check_out: date
    ) -> list[ReservedInterval]:
        rows = await self._request(
            "GET",
            RESERVATIONS_TABLE,
            params=[
                ("select", "id,guest_name,start_date,end_date,apartment_ids"),
                ("apartment_ids", f"cs.{json.dumps([unit_slug(unit_id)])}"),
                ("start_date", f"lt.{check_out.isoformat()}"),
                ("end_date", f"gt.{check_in.isoformat()}"),
            ],
        )
        return [
            ReservedInterval(
                id=str(row["id"]),
                kind=IntervalKind.reservation,
                start_date=row["start_date"],
                end_date=row["end_date"],
                unit_ids=row.get("apartment_ids") or [],
                label=row.get("guest_name"),
            )
            for row in rows
        ]

    async def _fetch_conflicting_blocks(
        self, unit_id: int, check_in: date, check_out: date
    ) -> list[ReservedInterval]:
        rows = await self._request(
            "GET",
            DATE_BLOCKS_TABLE,
            params=[
                ("select", "id,apartment_id,start_date,end_date,block_reason"),
                ("is_active", "eq.true"),
                ("or", f"(apartment_id.eq.{unit_id},apartment_id.is.null)"),
                ("start_date", f"lt.{check_out.isoformat()}"),
                ("end_date", f"gt.{check_in.isoformat()}"),
            ],
        )
        return [
            ReservedInterval(
                id=str(row["id"]),
                kind=IntervalKind.block,
                start_date=row["start_date"],
                end_date=row["end_date"],
                unit_ids=[row["apartment_id"]] if row.get("apartment_id") else [],
                label=row.get("block_reason"),
            )
            for row in rows
        ]

    async def save_quote_request(
        self,
        params: QuoteParams,
        result: QuoteResult,
        contact: QuoteContact | None = None,
    ) -> int:
        contact = contact or QuoteContact()
        payload = {
            "checkin_date": params.check_in.isoformat(),
            "checkout_date": params.check_out.isoformat(),
            "adults": params.adults,
            "children": params.children,
            "children_no_bed": params.children_no_bed,
            "selected_apartments": params.units,
            "has_pet": params.has_pet,
            "pet_apartment": params.pet_unit,
            "linen_requested": params.needs_linen,
            "base_total": result.base_total,
            "discount_total": result.discount_total,
            "extras_total": result.extras_total,
            "final_total": result.final_total,
            "guest_name": contact.guest_name,
            "guest_email": contact.guest_email,
            "guest_phone": contact.guest_phone,
        }

        rows = await self._request(
            "POST",
            QUOTE_REQUESTS_TABLE,
            params=[("select", "id")],
            payload=payload,
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise SupabaseError("Quote request insert returned no row")

        quote_id = int(rows[0]["id"])
        logger.info("Saved quote request %s", quote_id)
        return quote_id
