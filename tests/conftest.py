import asyncio
from datetime import date

import httpx
import pytest
from httpx import ASGITransport

from app.cache import ResultCache
from app.exceptions.custom import SupabaseError
from app.schemas.pricing import (
    QuoteContact,
    QuoteParams,
    QuoteResult,
    RentalUnit,
    ReservedInterval,
    WeeklyRateBucket,
)
from app.services.pricing import PricingService
from app.services.supabase import unit_slug

SUPABASE_URL = "https://test-project.supabase.co"


class InFlightGate:
    """Holds every caller until `expected` callers are waiting at once.

    Callers that arrive one at a time never reach the count and time out.
    """

    def __init__(self, expected: int, timeout: float = 1.0) -> None:
        self.expected = expected
        self.timeout = timeout
        self.arrived = 0
        self._released = asyncio.Event()

    async def wait(self) -> None:
        self.arrived += 1
        if self.arrived >= self.expected:
            self._released.set()
        await asyncio.wait_for(self._released.wait(), self.timeout)


class FakeBackend:
    """In-memory stand-in for SupabaseService that counts fetches."""

    def __init__(self) -> None:
        self.units: dict[int, RentalUnit] = {}
        self.buckets: dict[int, list[WeeklyRateBucket]] = {}
        self.intervals: dict[int, list[ReservedInterval]] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, int]] = []
        self.saved: list[tuple[QuoteParams, QuoteResult, QuoteContact | None]] = []
        self.gates: dict[str, InFlightGate] = {}

    def add_unit(self, unit_id: int, capacity: int, name: str | None = None) -> None:
        self.units[unit_id] = RentalUnit(
            id=unit_id, name=name or f"Appartamento {unit_id}", beds=capacity
        )

    def add_bucket(self, unit_id: int, start: date, end: date, price: float) -> None:
        self.buckets.setdefault(unit_id, []).append(
            WeeklyRateBucket(
                apartment_id=unit_slug(unit_id),
                week_start=start,
                week_end=end,
                price=price,
            )
        )

    def add_interval(self, unit_id: int, interval: ReservedInterval) -> None:
        self.intervals.setdefault(unit_id, []).append(interval)

    def _check(self, operation: str, unit_id: int) -> None:
        self.calls.append((operation, unit_id))
        if operation in self.failing:
            raise SupabaseError(f"{operation} failed", status_code=503)

    async def _enter(self, operation: str, unit_id: int) -> None:
        self._check(operation, unit_id)
        if gate := self.gates.get(operation):
            await gate.wait()

    def hold(self, *operations: str, expected: int) -> InFlightGate:
        gate = InFlightGate(expected)
        for operation in operations:
            self.gates[operation] = gate
        return gate

    async def fetch_unit(self, unit_id):
        await self._enter("fetch_unit", unit_id)
        if unit_id not in self.units:
            raise SupabaseError(f"Apartment {unit_id} not found", status_code=404)
        return self.units[unit_id]

    async def fetch_rate_buckets(self, unit_id, years, check_in=None, check_out=None):
        await self._enter("fetch_rate_buckets", unit_id)
        return [
            b for b in self.buckets.get(unit_id, [])
            if (check_in is None or b.end >= check_in)
            and (check_out is None or b.start <= check_out)
        ]

    async def fetch_conflicting_intervals(self, unit_id, check_in, check_out):
        await self._enter("fetch_conflicting_intervals", unit_id)
        return list(self.intervals.get(unit_id, []))

    async def save_quote_request(self, params, result, contact=None):
        self.saved.append((params, result, contact))
        return len(self.saved)

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def cache():
    return ResultCache(ttl_seconds=300)


@pytest.fixture
def service(backend, cache):
    return PricingService(backend, cache)


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", SUPABASE_URL)
    monkeypatch.setenv("SUPABASE_KEY", "test-anon-key")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "300")


@pytest.fixture
async def client(mock_env):
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
