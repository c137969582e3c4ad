"""Quote calculator: nightly pricing, fees and payment surcharge for a stay request.

Pure function of its arguments. Configuration comes in as immutable snapshots
(RateTable, SeasonalModifierSet, AvailabilitySet); nothing is read from the
database here, so callers can run it concurrently without locking.

Percentage modifiers that apply to the same night are added together and
applied once: base * (1 + sum / 100). They are not compounded.
"""
import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator

from app.schemas.pricing import (
    AppliedModifier,
    AvailabilitySet,
    DateUnavailable,
    GuestLimitExceeded,
    InvalidDateRange,
    MinimumStayNotMet,
    ModifierKind,
    NightlyPrice,
    QuoteBreakdown,
    QuoteError,
    QuoteRequest,
    RateTable,
    SeasonalModifierSet,
    UnknownPaymentMethod,
)

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def _money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """Every night of the stay: check_in inclusive, check_out exclusive."""
    day = check_in
    while day < check_out:
        yield day
        day += timedelta(days=1)


def applicable_modifiers(day: date, seasonal: SeasonalModifierSet, holidays=None) -> list[AppliedModifier]:
    """Percentage modifiers whose calendar condition matches `day`. Zero percentages are left out."""
    candidates = [
        (ModifierKind.weekend, day.weekday() >= 5, seasonal.weekend_surcharge_pct),
        (ModifierKind.holiday, holidays is not None and holidays.is_holiday(day), seasonal.holiday_surcharge_pct),
        (ModifierKind.december, day.month == 12, seasonal.december_surcharge_pct),
        (ModifierKind.high_season, day.month in seasonal.high_season_months, seasonal.high_season_surcharge_pct),
    ]
    return [AppliedModifier(kind=kind, pct=pct) for kind, matches, pct in candidates if matches and pct]


def price_night(day: date, rate_table: RateTable, seasonal: SeasonalModifierSet, holidays=None) -> NightlyPrice:
    custom = seasonal.custom_price_by_date.get(day)
    if custom is not None:
        return NightlyPrice(
            date=day,
            base_price_used=custom,
            price=_money(custom),
            modifiers_applied=[AppliedModifier(kind=ModifierKind.custom_price, absolute=custom)],
        )

    base = rate_table.base_price_per_night
    modifiers = applicable_modifiers(day, seasonal, holidays)
    total_pct = sum((m.pct for m in modifiers), ZERO)
    return NightlyPrice(
        date=day,
        base_price_used=base,
        price=_money(base * (1 + total_pct / HUNDRED)),
        modifiers_applied=modifiers,
    )


def compute_quote(
    rate_table: RateTable,
    seasonal_modifiers: SeasonalModifierSet,
    availability: AvailabilitySet,
    request: QuoteRequest,
    holidays=None,
    max_nights: int | None = None,
) -> QuoteBreakdown | QuoteError:
    """Price a stay or return the reason it cannot be priced.

    `holidays` is any object with `is_holiday(date) -> bool`; when None no night
    counts as a holiday. `max_nights` caps the stay length (longer requests are
    an invalid date range).

    Checks run in this order and the first failure is returned: date range,
    guest limit, blocked nights (earliest first), minimum stay, payment method.
    """
    nights = (request.check_out - request.check_in).days
    if nights <= 0:
        return _reject(InvalidDateRange(
            check_in=request.check_in,
            check_out=request.check_out,
            message="Check-out must be after check-in.",
        ))
    if max_nights is not None and nights > max_nights:
        return _reject(InvalidDateRange(
            check_in=request.check_in,
            check_out=request.check_out,
            message=f"Stay of {nights} nights exceeds the maximum of {max_nights} nights per quote.",
        ))

    if rate_table.max_guests is not None and request.guest_count > rate_table.max_guests:
        return _reject(GuestLimitExceeded(
            maximum=rate_table.max_guests,
            requested=request.guest_count,
            message=f"Property accepts at most {rate_table.max_guests} guests, {request.guest_count} requested.",
        ))

    extra_guests = max(0, request.guest_count - rate_table.base_guest_count)
    extra_guest_fee_per_night = extra_guests * rate_table.price_per_extra_guest

    nightly: list[NightlyPrice] = []
    subtotal_nights = ZERO
    extra_guest_fee_total = ZERO
    surcharge_totals: dict[ModifierKind, Decimal] = defaultdict(lambda: ZERO)

    for day in iter_nights(request.check_in, request.check_out):
        if day in availability.blocked_dates:
            return _reject(DateUnavailable(
                date=day,
                message=f"{day.isoformat()} is not available.",
            ))

        night = price_night(day, rate_table, seasonal_modifiers, holidays)
        nightly.append(night)
        subtotal_nights += night.price
        extra_guest_fee_total += extra_guest_fee_per_night

        for modifier in night.modifiers_applied:
            if modifier.kind == ModifierKind.custom_price:
                surcharge_totals[modifier.kind] += night.price - rate_table.base_price_per_night
            else:
                surcharge_totals[modifier.kind] += _money(rate_table.base_price_per_night * modifier.pct / HUNDRED)

    if nights < rate_table.minimum_nights:
        return _reject(MinimumStayNotMet(
            required=rate_table.minimum_nights,
            actual=nights,
            message=f"Minimum stay is {rate_table.minimum_nights} night(s), requested {nights}.",
        ))

    surcharge_pct = rate_table.payment_method_surcharge.get(request.payment_method)
    if surcharge_pct is None:
        return _reject(UnknownPaymentMethod(
            payment_method=request.payment_method.value,
            message=f"No pricing configured for payment method {request.payment_method.value}.",
        ))

    subtotal_nights = _money(subtotal_nights)
    extra_guest_fee_total = _money(extra_guest_fee_total)
    payment_surcharge_amount = _money((subtotal_nights + extra_guest_fee_total) * surcharge_pct / HUNDRED)
    cleaning_fee = _money(rate_table.cleaning_fee)

    total = subtotal_nights + extra_guest_fee_total + cleaning_fee + payment_surcharge_amount
    # Unreachable with validated inputs (surcharge >= -100%, fees >= 0); guards unvalidated configuration
    clamped = total < 0
    if clamped:
        logger.warning("Quote total %s below zero for %s-%s; clamped to 0", total, request.check_in, request.check_out)
        total = ZERO

    prices = [n.price for n in nightly]
    breakdown = QuoteBreakdown(
        check_in=request.check_in,
        check_out=request.check_out,
        nights=nights,
        guest_count=request.guest_count,
        extra_guests=extra_guests,
        payment_method=request.payment_method,
        currency=rate_table.currency,
        nightly=nightly,
        subtotal_nights=subtotal_nights,
        extra_guest_fee_total=extra_guest_fee_total,
        cleaning_fee=cleaning_fee,
        payment_surcharge_pct=surcharge_pct,
        payment_surcharge_amount=payment_surcharge_amount,
        total=_money(total),
        clamped=clamped,
        average_price_per_night=_money(subtotal_nights / nights),
        min_nightly_price=min(prices),
        max_nightly_price=max(prices),
        surcharge_totals={kind: _money(amount) for kind, amount in surcharge_totals.items()},
    )
    logger.debug(
        "Quote %s-%s guests=%d method=%s total=%s",
        request.check_in, request.check_out, request.guest_count, request.payment_method.value, breakdown.total,
    )
    return breakdown


def _reject(error: QuoteError) -> QuoteError:
    logger.info("Quote rejected (%s): %s", error.code, error.message)
    return error
