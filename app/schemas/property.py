"""Property and pricing configuration schemas."""
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator, model_validator
from app.models.reservation import PaymentMethod
from app.schemas.pricing import AppliedModifier, RateTable, SeasonalModifierSet, SURCHARGE_PCT_MIN, SURCHARGE_PCT_MAX


def _check_surcharges(v: dict[PaymentMethod, Decimal] | None) -> dict[PaymentMethod, Decimal] | None:
    if v is None:
        return v
    for method, pct in v.items():
        if not SURCHARGE_PCT_MIN <= pct <= SURCHARGE_PCT_MAX:
            raise ValueError(f"surcharge for {method.value} must be between -100 and 100")
    return v


def _check_months(v: list[int] | None) -> list[int] | None:
    if v is None:
        return v
    if any(not 1 <= m <= 12 for m in v):
        raise ValueError("high_season_months must contain months 1-12")
    return sorted(set(v))


class PropertyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    city: str | None = None
    state: str | None = None
    region_code: str | None = None  # holiday region; defaults to settings.default_holiday_region
    currency: str | None = None

    base_price_per_night: Decimal = Field(ge=0)
    price_per_extra_guest: Decimal = Field(default=Decimal("0"), ge=0)
    cleaning_fee: Decimal = Field(default=Decimal("0"), ge=0)
    minimum_nights: int = Field(default=1, ge=1)
    base_guest_count: int = Field(default=2, ge=1)
    max_guests: int | None = Field(default=None, ge=1)
    payment_method_surcharges: dict[PaymentMethod, Decimal] | None = None

    weekend_surcharge_pct: Decimal = Field(default=Decimal("0"), ge=0)
    holiday_surcharge_pct: Decimal = Field(default=Decimal("0"), ge=0)
    december_surcharge_pct: Decimal = Field(default=Decimal("0"), ge=0)
    high_season_surcharge_pct: Decimal = Field(default=Decimal("0"), ge=0)
    high_season_months: list[int] | None = None

    @field_validator("payment_method_surcharges")
    @classmethod
    def surcharges_in_range(cls, v: dict[PaymentMethod, Decimal] | None) -> dict[PaymentMethod, Decimal] | None:
        return _check_surcharges(v)

    @field_validator("high_season_months")
    @classmethod
    def months_in_range(cls, v: list[int] | None) -> list[int] | None:
        return _check_months(v)


class PropertyUpdate(BaseModel):
    """All optional; only provided fields are updated."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    city: str | None = None
    state: str | None = None
    region_code: str | None = None
    currency: str | None = None

    base_price_per_night: Decimal | None = Field(default=None, ge=0)
    price_per_extra_guest: Decimal | None = Field(default=None, ge=0)
    cleaning_fee: Decimal | None = Field(default=None, ge=0)
    minimum_nights: int | None = Field(default=None, ge=1)
    base_guest_count: int | None = Field(default=None, ge=1)
    max_guests: int | None = Field(default=None, ge=1)
    payment_method_surcharges: dict[PaymentMethod, Decimal] | None = None

    weekend_surcharge_pct: Decimal | None = Field(default=None, ge=0)
    holiday_surcharge_pct: Decimal | None = Field(default=None, ge=0)
    december_surcharge_pct: Decimal | None = Field(default=None, ge=0)
    high_season_surcharge_pct: Decimal | None = Field(default=None, ge=0)
    high_season_months: list[int] | None = None

    @field_validator("payment_method_surcharges")
    @classmethod
    def surcharges_in_range(cls, v: dict[PaymentMethod, Decimal] | None) -> dict[PaymentMethod, Decimal] | None:
        return _check_surcharges(v)

    @field_validator("high_season_months")
    @classmethod
    def months_in_range(cls, v: list[int] | None) -> list[int] | None:
        return _check_months(v)


class PropertyResponse(BaseModel):
    id: int
    name: str
    city: str | None
    state: str | None
    region_code: str
    currency: str
    base_price_per_night: Decimal
    price_per_extra_guest: Decimal
    cleaning_fee: Decimal
    minimum_nights: int
    base_guest_count: int
    max_guests: int | None
    payment_method_surcharges: dict[str, Decimal] | None = None
    weekend_surcharge_pct: Decimal
    holiday_surcharge_pct: Decimal
    december_surcharge_pct: Decimal
    high_season_surcharge_pct: Decimal
    high_season_months: list[int] | None = None
    created_at: datetime | None = None
    deleted_at: datetime | None = None

    class Config:
        from_attributes = True


class PricingConfig(BaseModel):
    """What the quote calculator sees for a property."""
    property_id: int
    rate_table: RateTable
    seasonal_modifiers: SeasonalModifierSet


class CustomPriceEntry(BaseModel):
    date: date
    price: Decimal = Field(ge=0)


class CustomPricesUpdate(BaseModel):
    prices: list[CustomPriceEntry] = Field(min_length=1)
    # When true, dates not listed are removed
    replace: bool = False


class CustomPriceResponse(BaseModel):
    date: date
    price: Decimal

    class Config:
        from_attributes = True


class CustomPriceUploadResult(BaseModel):
    imported: int
    failed: int
    errors: list[str]


MAX_RANGE_DAYS = 366


class CustomPriceRangeUpdate(BaseModel):
    """One price for every date in start_date..end_date (inclusive). Reserved dates are skipped."""
    start_date: date
    end_date: date
    price: Decimal | None = Field(default=None, ge=0)
    # Relative to the base nightly price; used instead of price
    percentage: Decimal | None = Field(default=None, ge=-100, le=1000)
    weekends_only: bool = False
    holidays_only: bool = False

    @model_validator(mode="after")
    def check_range(self):
        if (self.price is None) == (self.percentage is None):
            raise ValueError("give exactly one of price or percentage")
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if (self.end_date - self.start_date).days >= MAX_RANGE_DAYS:
            raise ValueError(f"range is limited to {MAX_RANGE_DAYS} days")
        return self


class CustomPriceRangeResult(BaseModel):
    price: Decimal
    applied: list[date]
    skipped_reserved: list[date]


class PriceCalendarDay(BaseModel):
    date: date
    price: Decimal
    base_price_used: Decimal
    modifiers_applied: list[AppliedModifier] = []
    is_weekend: bool
    holiday_name: str | None = None
    has_custom_price: bool = False
    is_blocked: bool = False
    is_reserved: bool = False


class PriceCalendar(BaseModel):
    property_id: int
    month: str  # YYYY-MM
    currency: str
    days: list[PriceCalendarDay]


class RevenueProjection(BaseModel):
    start_date: date
    end_date: date
    currency: str
    total_nights: int
    occupied_nights: int
    occupancy_rate: Decimal
    average_nightly_rate: Decimal
    total_revenue: Decimal


class BlockedDatesUpdate(BaseModel):
    dates: list[date] = Field(min_length=1)
    reason: str | None = Field(default=None, max_length=255)


class BlockedDateResponse(BaseModel):
    date: date
    reason: str | None = None

    class Config:
        from_attributes = True
