"""Build validated quote calculator inputs from stored property rows.

Stored JSON (surcharges, high season months) may be partially shaped; everything
is normalised here so the calculator only ever sees complete, typed values.
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from sqlalchemy.orm import Session

from app.models.property import Property, PropertyBlockedDate, PropertyCustomPrice
from app.models.reservation import ACTIVE_STATUSES, PaymentMethod, Reservation
from app.config import get_settings
from app.schemas.pricing import AvailabilitySet, QuoteBreakdown, QuoteError, QuoteRequest, RateTable, SeasonalModifierSet
from app.services.holidays import load_holiday_calendar
from app.services.quote import compute_quote, iter_nights

logger = logging.getLogger(__name__)
settings = get_settings()


def _decimal(value: Any, default: str = "0") -> Decimal:
    if value is None:
        return Decimal(default)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal(default)


def normalize_surcharges(raw: dict[str, Any] | None) -> dict[PaymentMethod, Decimal]:
    """Every known payment method gets an entry (0% when not configured). Unknown keys are dropped."""
    surcharges = {method: Decimal("0") for method in PaymentMethod}
    for key, pct in (raw or {}).items():
        try:
            method = PaymentMethod(str(key).strip().lower())
        except ValueError:
            logger.warning("Ignoring surcharge for unknown payment method %r", key)
            continue
        surcharges[method] = _decimal(pct)
    return surcharges


def normalize_months(raw: Iterable[Any] | None) -> frozenset[int]:
    months = set()
    for m in raw or ():
        try:
            month = int(m)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid high season month %r", m)
            continue
        if 1 <= month <= 12:
            months.add(month)
        else:
            logger.warning("Ignoring out-of-range high season month %r", m)
    return frozenset(months)


def rate_table_from_property(prop: Property) -> RateTable:
    return RateTable(
        base_price_per_night=_decimal(prop.base_price_per_night),
        price_per_extra_guest=_decimal(prop.price_per_extra_guest),
        cleaning_fee=_decimal(prop.cleaning_fee),
        minimum_nights=prop.minimum_nights or 1,
        base_guest_count=prop.base_guest_count or 2,
        max_guests=prop.max_guests,
        payment_method_surcharge=normalize_surcharges(prop.payment_method_surcharges),
        currency=prop.currency or "BRL",
    )


def seasonal_modifiers_from_property(
    prop: Property,
    custom_prices: Iterable[PropertyCustomPrice] | None = None,
) -> SeasonalModifierSet:
    rows = prop.custom_prices if custom_prices is None else custom_prices
    return SeasonalModifierSet(
        weekend_surcharge_pct=_decimal(prop.weekend_surcharge_pct),
        holiday_surcharge_pct=_decimal(prop.holiday_surcharge_pct),
        december_surcharge_pct=_decimal(prop.december_surcharge_pct),
        high_season_surcharge_pct=_decimal(prop.high_season_surcharge_pct),
        high_season_months=normalize_months(prop.high_season_months),
        custom_price_by_date={row.date: _decimal(row.price) for row in rows},
    )


def availability_from_rows(
    blocked: Iterable[PropertyBlockedDate],
    reservations: Iterable[Reservation] = (),
) -> AvailabilitySet:
    """Explicitly blocked dates plus every night held by an active reservation."""
    dates: set[date] = {row.date for row in blocked}
    for r in reservations:
        dates.update(iter_nights(r.check_in, r.check_out))
    return AvailabilitySet(blocked_dates=frozenset(dates))


def _blocked_rows(db: Session, prop: Property, start: date, end: date) -> list[PropertyBlockedDate]:
    return db.query(PropertyBlockedDate).filter(
        PropertyBlockedDate.property_id == prop.id,
        PropertyBlockedDate.date >= start,
        PropertyBlockedDate.date < end,
    ).all()


def _active_reservations(db: Session, prop: Property, start: date, end: date) -> list[Reservation]:
    """Pending or confirmed reservations holding at least one night in [start, end)."""
    return db.query(Reservation).filter(
        Reservation.property_id == prop.id,
        Reservation.status.in_(ACTIVE_STATUSES),
        Reservation.check_in < end,
        Reservation.check_out > start,
    ).all()


def load_reserved_dates(db: Session, prop: Property, start: date, end: date) -> frozenset[date]:
    """Nights in [start, end) held by active reservations (blocked dates not included)."""
    nights = availability_from_rows((), _active_reservations(db, prop, start, end)).blocked_dates
    return frozenset(d for d in nights if start <= d < end)


def load_availability(db: Session, prop: Property, check_in: date, check_out: date) -> AvailabilitySet:
    """Availability for [check_in, check_out) only; other dates are irrelevant to the quote."""
    return availability_from_rows(
        _blocked_rows(db, prop, check_in, check_out),
        _active_reservations(db, prop, check_in, check_out),
    )


def quote_property(db: Session, prop: Property, request: QuoteRequest) -> QuoteBreakdown | QuoteError:
    """Load the property's configuration snapshot and run the calculator on it."""
    return compute_quote(
        rate_table_from_property(prop),
        seasonal_modifiers_from_property(prop),
        load_availability(db, prop, request.check_in, request.check_out),
        request,
        holidays=load_holiday_calendar(db, prop.region_code),
        max_nights=settings.max_quote_nights,
    )
