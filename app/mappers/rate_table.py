import math
from collections.abc import Iterable
from datetime import date, timedelta
from fractions import Fraction

from app.schemas.pricing import WeeklyRateBucket

NIGHTS_PER_WEEK = 7


def stay_nights(check_in: date, check_out: date) -> list[date]:
    """Every paid night of the stay. The checkout day is not a night."""
    return [check_in + timedelta(days=i) for i in range((check_out - check_in).days)]


def stay_years(check_in: date, check_out: date) -> list[int]:
    return list(range(check_in.year, check_out.year + 1))


def find_bucket(
    buckets: Iterable[WeeklyRateBucket], night: date
) -> WeeklyRateBucket | None:
    for bucket in buckets:
        if bucket.covers(night):
            return bucket
    return None


def round_half_up(value: float | Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def resolve_period_price(
    buckets: list[WeeklyRateBucket],
    check_in: date,
    check_out: date,
) -> tuple[int, list[date]]:
    """Sum price/7 for each night inside a bucket.

    Returns the total rounded to whole currency units and the nights no
    bucket covers. Callers must treat a non-empty second element as missing
    pricing data, not as free nights.
    """
    # Exact arithmetic: a fractional weekly price must not drift below x.5.
    total = Fraction(0)
    missing: list[date] = []
    for night in stay_nights(check_in, check_out):
        bucket = find_bucket(buckets, night)
        if bucket is None:
            missing.append(night)
            continue
        total += Fraction(str(bucket.price)) / NIGHTS_PER_WEEK
    return round_half_up(total), missing
