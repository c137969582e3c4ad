"""Quote calculator types: pricing configuration, quote request, breakdown and errors."""
from datetime import date
from decimal import Decimal
from typing import ClassVar, Literal
import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.reservation import PaymentMethod

SURCHARGE_PCT_MIN = Decimal("-100")
SURCHARGE_PCT_MAX = Decimal("100")


class ModifierKind(str, enum.Enum):
    weekend = "weekend"
    holiday = "holiday"
    december = "december"
    high_season = "high_season"
    custom_price = "custom_price"


class RateTable(BaseModel):
    """Static per-property prices and fees."""
    model_config = ConfigDict(frozen=True)

    base_price_per_night: Decimal = Field(ge=0)
    price_per_extra_guest: Decimal = Field(default=Decimal("0"), ge=0)
    cleaning_fee: Decimal = Field(default=Decimal("0"), ge=0)
    minimum_nights: int = Field(default=1, ge=1)
    base_guest_count: int = Field(default=2, ge=1)
    max_guests: int | None = Field(default=None, ge=1)
    # Percentage per method; negative is a discount
    payment_method_surcharge: dict[PaymentMethod, Decimal] = Field(default_factory=dict)
    currency: str = "BRL"

    @field_validator("payment_method_surcharge")
    @classmethod
    def surcharge_in_range(cls, v: dict[PaymentMethod, Decimal]) -> dict[PaymentMethod, Decimal]:
        for method, pct in v.items():
            if not SURCHARGE_PCT_MIN <= pct <= SURCHARGE_PCT_MAX:
                raise ValueError(f"surcharge for {method.value} must be between -100 and 100, got {pct}")
        return v


class SeasonalModifierSet(BaseModel):
    """Calendar-driven percentage modifiers plus absolute per-date overrides."""
    model_config = ConfigDict(frozen=True)

    weekend_surcharge_pct: Decimal = Field(default=Decimal("0"), ge=0)
    holiday_surcharge_pct: Decimal = Field(default=Decimal("0"), ge=0)
    december_surcharge_pct: Decimal = Field(default=Decimal("0"), ge=0)
    high_season_surcharge_pct: Decimal = Field(default=Decimal("0"), ge=0)
    high_season_months: frozenset[int] = frozenset()
    custom_price_by_date: dict[date, Decimal] = Field(default_factory=dict)

    @field_validator("high_season_months")
    @classmethod
    def months_in_range(cls, v: frozenset[int]) -> frozenset[int]:
        bad = sorted(m for m in v if not 1 <= m <= 12)
        if bad:
            raise ValueError(f"high season months must be 1-12, got {bad}")
        return v

    @field_validator("custom_price_by_date")
    @classmethod
    def custom_prices_non_negative(cls, v: dict[date, Decimal]) -> dict[date, Decimal]:
        for day, price in v.items():
            if price < 0:
                raise ValueError(f"custom price for {day.isoformat()} must be >= 0")
        return v


class AvailabilitySet(BaseModel):
    model_config = ConfigDict(frozen=True)

    blocked_dates: frozenset[date] = frozenset()


class QuoteRequest(BaseModel):
    check_in: date
    check_out: date
    guest_count: int = Field(ge=1)
    payment_method: PaymentMethod


class AppliedModifier(BaseModel):
    kind: ModifierKind
    pct: Decimal | None = None
    absolute: Decimal | None = None


class NightlyPrice(BaseModel):
    date: date
    # Starting price for the night: the rate table base, or the custom price when one is set
    base_price_used: Decimal
    price: Decimal
    modifiers_applied: list[AppliedModifier] = []


class QuoteBreakdown(BaseModel):
    """Itemised price for one stay request. Never mutated once built."""
    model_config = ConfigDict(frozen=True)

    check_in: date
    check_out: date
    nights: int
    guest_count: int
    extra_guests: int
    payment_method: PaymentMethod
    currency: str

    nightly: list[NightlyPrice]
    subtotal_nights: Decimal
    extra_guest_fee_total: Decimal
    cleaning_fee: Decimal
    payment_surcharge_pct: Decimal
    payment_surcharge_amount: Decimal
    total: Decimal
    # True when the raw total came out negative and was clamped to zero
    clamped: bool = False

    average_price_per_night: Decimal
    min_nightly_price: Decimal
    max_nightly_price: Decimal
    # Amount each modifier kind added over the base price, summed over the stay
    surcharge_totals: dict[ModifierKind, Decimal] = {}


class QuoteError(BaseModel):
    """Base for rejected quote requests. Returned, not raised."""
    model_config = ConfigDict(frozen=True)

    http_status: ClassVar[int] = 422

    code: str
    message: str


class InvalidDateRange(QuoteError):
    code: Literal["invalid_date_range"] = "invalid_date_range"
    check_in: date
    check_out: date


class DateUnavailable(QuoteError):
    http_status: ClassVar[int] = 409

    code: Literal["date_unavailable"] = "date_unavailable"
    date: date


class MinimumStayNotMet(QuoteError):
    code: Literal["minimum_stay_not_met"] = "minimum_stay_not_met"
    required: int
    actual: int


class UnknownPaymentMethod(QuoteError):
    code: Literal["unknown_payment_method"] = "unknown_payment_method"
    payment_method: str


class GuestLimitExceeded(QuoteError):
    code: Literal["guest_limit_exceeded"] = "guest_limit_exceeded"
    maximum: int
    requested: int
