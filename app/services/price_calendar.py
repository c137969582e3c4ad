"""Per-date price views built on the quote calculator's nightly pricing.

- price calendar: every date of a month with its computed price, modifiers and availability flags
- range pricing: which dates of a range receive a bulk custom price
- revenue projection: expected revenue for a period at an assumed occupancy

Ranges here are inclusive of both ends (calendar selections, not stays).
"""
import calendar as _calendar
import math
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator

from sqlalchemy.orm import Session

from app.models.property import Property
from app.schemas.pricing import RateTable, SeasonalModifierSet
from app.schemas.property import PriceCalendar, PriceCalendarDay, RevenueProjection
from app.services.holidays import HolidayCalendar, load_holiday_calendar
from app.services.pricing_config import (
    load_reserved_dates,
    rate_table_from_property,
    seasonal_modifiers_from_property,
)
from app.services.quote import price_night

TWO_PLACES = Decimal("0.01")


def iter_days(start: date, end: date) -> Iterator[date]:
    """start..end, both inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, _calendar.monthrange(year, month)[1])


def calendar_days(
    start: date,
    end: date,
    rate_table: RateTable,
    seasonal: SeasonalModifierSet,
    holidays: HolidayCalendar | None = None,
    blocked: frozenset[date] = frozenset(),
    reserved: frozenset[date] = frozenset(),
) -> list[PriceCalendarDay]:
    days = []
    for day in iter_days(start, end):
        night = price_night(day, rate_table, seasonal, holidays)
        days.append(PriceCalendarDay(
            date=day,
            price=night.price,
            base_price_used=night.base_price_used,
            modifiers_applied=night.modifiers_applied,
            is_weekend=day.weekday() >= 5,
            holiday_name=holidays.name_for(day) if holidays is not None else None,
            has_custom_price=day in seasonal.custom_price_by_date,
            is_blocked=day in blocked,
            is_reserved=day in reserved,
        ))
    return days


def load_price_calendar(db: Session, prop: Property, year: int, month: int) -> PriceCalendar:
    start, end = month_bounds(year, month)
    after_end = end + timedelta(days=1)
    blocked = frozenset(b.date for b in prop.blocked_dates if start <= b.date <= end)
    days = calendar_days(
        start,
        end,
        rate_table_from_property(prop),
        seasonal_modifiers_from_property(prop),
        holidays=load_holiday_calendar(db, prop.region_code),
        blocked=blocked,
        reserved=load_reserved_dates(db, prop, start, after_end),
    )
    return PriceCalendar(property_id=prop.id, month=f"{year:04d}-{month:02d}", currency=prop.currency, days=days)


def range_price(base_price: Decimal, price: Decimal | None, percentage: Decimal | None) -> Decimal:
    """Explicit price, or base * (1 + percentage / 100) when a percentage is given."""
    if percentage is not None:
        return (base_price * (1 + percentage / Decimal("100"))).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return price.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def select_range_dates(
    start: date,
    end: date,
    reserved: frozenset[date] = frozenset(),
    holidays: HolidayCalendar | None = None,
    weekends_only: bool = False,
    holidays_only: bool = False,
) -> tuple[list[date], list[date]]:
    """(dates to price, reserved dates skipped). With both filters set, a date matching either is priced."""
    selected, skipped = [], []
    for day in iter_days(start, end):
        if weekends_only or holidays_only:
            matches = (weekends_only and day.weekday() >= 5) or (
                holidays_only and holidays is not None and holidays.is_holiday(day)
            )
            if not matches:
                continue
        if day in reserved:
            skipped.append(day)
        else:
            selected.append(day)
    return selected, skipped


def project_revenue(
    start: date,
    end: date,
    rate_table: RateTable,
    seasonal: SeasonalModifierSet,
    occupancy_rate: Decimal,
    holidays: HolidayCalendar | None = None,
    currency: str = "BRL",
) -> RevenueProjection:
    """Average computed nightly price over the period times the expected occupied nights (rounded down)."""
    prices = [price_night(day, rate_table, seasonal, holidays).price for day in iter_days(start, end)]
    total_nights = len(prices)
    occupied = math.floor(total_nights * occupancy_rate)
    average = (sum(prices, Decimal("0")) / total_nights).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return RevenueProjection(
        start_date=start,
        end_date=end,
        currency=currency,
        total_nights=total_nights,
        occupied_nights=occupied,
        occupancy_rate=occupancy_rate,
        average_nightly_rate=average,
        total_revenue=(average * occupied).quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
    )
