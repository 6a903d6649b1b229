from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class RentalUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    capacity: int = Field(validation_alias=AliasChoices("beds", "capacity"), gt=0)
    cleaning_fee: float | None = None
    description: str | None = None
    features: list[str] | None = None


class WeeklyRateBucket(BaseModel):
    """Weekly price row. `price` is a 7-night rate whatever the bucket length."""

    model_config = ConfigDict(frozen=True)

    unit_id: str = Field(validation_alias=AliasChoices("apartment_id", "unit_id"))
    start: date = Field(validation_alias=AliasChoices("week_start", "start"))
    end: date = Field(validation_alias=AliasChoices("week_end", "end"))
    price: float
    year: int | None = None
    week_number: int | None = None
    season: str | None = Field(
        default=None, validation_alias=AliasChoices("season_name", "season")
    )

    @model_validator(mode="after")
    def _check_range(self) -> WeeklyRateBucket:
        if self.start > self.end:
            raise ValueError("week_start must not be after week_end")
        return self

    def covers(self, night: date) -> bool:
        return self.start <= night <= self.end


class IntervalKind(StrEnum):
    reservation = "reservation"
    block = "block"


class ReservedInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: IntervalKind
    start_date: date
    end_date: date
    unit_ids: list[str] = []  # empty for a global block
    label: str | None = None  # guest name or block reason

    def overlaps(self, check_in: date, check_out: date) -> bool:
        return self.start_date < check_out and self.end_date > check_in


class QuoteParams(BaseModel):
    units: list[int] = Field(min_length=1)
    check_in: date
    check_out: date
    adults: int = Field(ge=0)
    children: int = Field(default=0, ge=0)
    children_no_bed: int = Field(default=0, ge=0)
    has_pet: bool = False
    pet_unit: int | None = None
    needs_linen: bool = False

    @model_validator(mode="after")
    def _check_invariants(self) -> QuoteParams:
        if self.check_in >= self.check_out:
            raise ValueError("check_in must be before check_out")
        if self.children_no_bed > self.children:
            raise ValueError("children_no_bed cannot exceed children")
        if len(set(self.units)) != len(self.units):
            raise ValueError("units must not contain duplicates")
        if self.pet_unit is not None and self.pet_unit not in self.units:
            raise ValueError("pet_unit must be one of the selected units")
        return self

    @property
    def guests_in_beds(self) -> int:
        return self.adults + self.children - self.children_no_bed

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


class QuoteContact(BaseModel):
    guest_name: str | None = None
    guest_email: str | None = None
    guest_phone: str | None = None


class DiscountType(StrEnum):
    occupancy = "occupancy"
    courtesy = "courtesy"
    none = "none"


class PerUnitQuoteLine(BaseModel):
    unit_id: int
    unit: RentalUnit
    base_price: int
    occupied_beds: int
    discount_percent: int
    discount_amount: float
    final_price: float


class QuoteResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: list[PerUnitQuoteLine]
    nights: int
    base_total: int
    discount_total: int
    discount_type: DiscountType
    extras_total: int
    final_total: int
    deposit: int
    balance: int
