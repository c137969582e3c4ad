from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.models.reservation import PaymentMethod
from app.schemas.pricing import (
    AvailabilitySet,
    DateUnavailable,
    GuestLimitExceeded,
    InvalidDateRange,
    MinimumStayNotMet,
    ModifierKind,
    QuoteBreakdown,
    QuoteRequest,
    RateTable,
    SeasonalModifierSet,
    UnknownPaymentMethod,
)
from app.services.holidays import HolidayCalendar
from app.services.quote import compute_quote, iter_nights

# 2031-03-03 is a Monday; March is outside every high season used here
MON = date(2031, 3, 3)
THU = date(2031, 3, 6)
SAT = date(2031, 3, 8)


def make_rate_table(**overrides):
    values = dict(
        base_price_per_night=Decimal("200"),
        price_per_extra_guest=Decimal("30"),
        cleaning_fee=Decimal("100"),
        minimum_nights=1,
        base_guest_count=2,
        payment_method_surcharge={m: Decimal("0") for m in PaymentMethod},
    )
    values.update(overrides)
    return RateTable(**values)


def make_request(check_in=MON, check_out=THU, guests=2, method=PaymentMethod.pix):
    return QuoteRequest(check_in=check_in, check_out=check_out, guest_count=guests, payment_method=method)


def test_end_to_end_weekday_stay():
    result = compute_quote(make_rate_table(), SeasonalModifierSet(), AvailabilitySet(), make_request(guests=3))

    assert isinstance(result, QuoteBreakdown)
    assert result.nights == 3
    assert result.subtotal_nights == Decimal("600.00")
    assert result.extra_guest_fee_total == Decimal("90.00")
    assert result.cleaning_fee == Decimal("100.00")
    assert result.payment_surcharge_amount == Decimal("0.00")
    assert result.total == Decimal("790.00")
    assert result.clamped is False
    assert [n.date for n in result.nightly] == [date(2031, 3, 3), date(2031, 3, 4), date(2031, 3, 5)]
    assert all(n.modifiers_applied == [] for n in result.nightly)


def test_same_inputs_give_identical_output():
    args = (
        make_rate_table(),
        SeasonalModifierSet(weekend_surcharge_pct=Decimal("20"), custom_price_by_date={SAT: Decimal("321.50")}),
        AvailabilitySet(),
        make_request(check_out=date(2031, 3, 10), guests=4),
    )
    first = compute_quote(*args)
    second = compute_quote(*args)
    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


def test_minimum_stay_boundary():
    rate_table = make_rate_table(minimum_nights=2)

    one_night = compute_quote(rate_table, SeasonalModifierSet(), AvailabilitySet(), make_request(check_out=date(2031, 3, 4)))
    assert isinstance(one_night, MinimumStayNotMet)
    assert (one_night.required, one_night.actual) == (2, 1)
    assert one_night.code == "minimum_stay_not_met"

    two_nights = compute_quote(rate_table, SeasonalModifierSet(), AvailabilitySet(), make_request(check_out=date(2031, 3, 5)))
    assert isinstance(two_nights, QuoteBreakdown)
    assert two_nights.nights == 2


@pytest.mark.parametrize("blocked", [date(2031, 3, 3), date(2031, 3, 4), date(2031, 3, 5)])
def test_blocked_date_is_named_wherever_it_falls(blocked):
    result = compute_quote(
        make_rate_table(), SeasonalModifierSet(), AvailabilitySet(blocked_dates=frozenset({blocked})), make_request()
    )
    assert isinstance(result, DateUnavailable)
    assert result.date == blocked
    assert result.http_status == 409


def test_check_out_day_is_not_a_night():
    result = compute_quote(
        make_rate_table(), SeasonalModifierSet(), AvailabilitySet(blocked_dates=frozenset({THU})), make_request()
    )
    assert isinstance(result, QuoteBreakdown)


def test_custom_price_wins_over_weekend_surcharge():
    seasonal = SeasonalModifierSet(weekend_surcharge_pct=Decimal("20"), custom_price_by_date={SAT: Decimal("500")})
    result = compute_quote(
        make_rate_table(), seasonal, AvailabilitySet(), make_request(check_in=SAT, check_out=date(2031, 3, 9))
    )
    night = result.nightly[0]
    assert night.price == Decimal("500.00")
    assert [m.kind for m in night.modifiers_applied] == [ModifierKind.custom_price]
    assert night.modifiers_applied[0].absolute == Decimal("500")
    assert result.surcharge_totals == {ModifierKind.custom_price: Decimal("300.00")}


def test_percentage_modifiers_are_added_not_compounded():
    seasonal = SeasonalModifierSet(
        december_surcharge_pct=Decimal("10"),
        weekend_surcharge_pct=Decimal("5"),
        high_season_surcharge_pct=Decimal("20"),
        high_season_months=frozenset({12}),
    )
    # 2031-12-06 is a Saturday
    request = make_request(check_in=date(2031, 12, 6), check_out=date(2031, 12, 7))
    result = compute_quote(make_rate_table(base_price_per_night=Decimal("100")), seasonal, AvailabilitySet(), request)

    night = result.nightly[0]
    assert night.price == Decimal("135.00")
    assert {m.kind for m in night.modifiers_applied} == {
        ModifierKind.weekend, ModifierKind.december, ModifierKind.high_season,
    }
    assert result.surcharge_totals[ModifierKind.high_season] == Decimal("20.00")


def test_discount_reduces_total_by_exact_share_of_subtotal():
    rate_table = make_rate_table(payment_method_surcharge={
        PaymentMethod.pix: Decimal("-10"),
        PaymentMethod.cash: Decimal("0"),
    })
    discounted = compute_quote(rate_table, SeasonalModifierSet(), AvailabilitySet(), make_request(guests=3))
    full = compute_quote(rate_table, SeasonalModifierSet(), AvailabilitySet(), make_request(guests=3, method=PaymentMethod.cash))

    base = discounted.subtotal_nights + discounted.extra_guest_fee_total
    assert discounted.payment_surcharge_amount == Decimal("-69.00")
    assert full.total - discounted.total == base * Decimal("0.10")
    assert discounted.total < full.total


def test_surcharge_does_not_apply_to_cleaning_fee():
    rate_table = make_rate_table(payment_method_surcharge={PaymentMethod.credit_card: Decimal("10")})
    result = compute_quote(
        rate_table, SeasonalModifierSet(), AvailabilitySet(), make_request(method=PaymentMethod.credit_card)
    )
    assert result.payment_surcharge_amount == Decimal("60.00")
    assert result.total == Decimal("760.00")


def test_full_discount_with_no_cleaning_fee_is_zero_not_negative():
    rate_table = make_rate_table(
        cleaning_fee=Decimal("0"),
        payment_method_surcharge={PaymentMethod.pix: Decimal("-100")},
    )
    result = compute_quote(rate_table, SeasonalModifierSet(), AvailabilitySet(), make_request(guests=4))
    assert result.total == Decimal("0.00")
    assert result.total >= 0


@pytest.mark.parametrize("check_out", [MON, date(2031, 3, 1)])
def test_check_out_must_follow_check_in(check_out):
    result = compute_quote(make_rate_table(), SeasonalModifierSet(), AvailabilitySet(), make_request(check_out=check_out))
    assert isinstance(result, InvalidDateRange)
    assert result.code == "invalid_date_range"
    assert result.http_status == 422


def test_stay_longer_than_max_nights_is_invalid():
    request = make_request(check_out=date(2031, 3, 13))
    result = compute_quote(make_rate_table(), SeasonalModifierSet(), AvailabilitySet(), request, max_nights=7)
    assert isinstance(result, InvalidDateRange)
    assert "maximum of 7" in result.message


def test_guest_limit():
    result = compute_quote(
        make_rate_table(max_guests=4), SeasonalModifierSet(), AvailabilitySet(), make_request(guests=5)
    )
    assert isinstance(result, GuestLimitExceeded)
    assert (result.maximum, result.requested) == (4, 5)


def test_payment_method_without_surcharge_entry():
    rate_table = make_rate_table(payment_method_surcharge={PaymentMethod.pix: Decimal("0")})
    result = compute_quote(rate_table, SeasonalModifierSet(), AvailabilitySet(), make_request(method=PaymentMethod.stripe))
    assert isinstance(result, UnknownPaymentMethod)
    assert result.payment_method == "stripe"


def test_blocked_date_reported_before_minimum_stay():
    rate_table = make_rate_table(minimum_nights=5)
    availability = AvailabilitySet(blocked_dates=frozenset({date(2031, 3, 4)}))
    result = compute_quote(rate_table, SeasonalModifierSet(), availability, make_request())
    assert isinstance(result, DateUnavailable)


def test_holiday_surcharge_needs_a_holiday_calendar():
    # 2031-04-21 (Tiradentes) is a Monday
    seasonal = SeasonalModifierSet(holiday_surcharge_pct=Decimal("50"))
    request = make_request(check_in=date(2031, 4, 21), check_out=date(2031, 4, 22))
    calendar = HolidayCalendar([(4, 21, "Tiradentes")])

    with_calendar = compute_quote(make_rate_table(), seasonal, AvailabilitySet(), request, holidays=calendar)
    without_calendar = compute_quote(make_rate_table(), seasonal, AvailabilitySet(), request)

    assert with_calendar.nightly[0].price == Decimal("300.00")
    assert with_calendar.nightly[0].modifiers_applied[0].kind == ModifierKind.holiday
    assert without_calendar.nightly[0].price == Decimal("200.00")


def test_display_aggregates():
    seasonal = SeasonalModifierSet(weekend_surcharge_pct=Decimal("20"))
    # Thu, Fri, Sat, Sun nights
    request = make_request(check_in=date(2031, 3, 6), check_out=date(2031, 3, 10))
    result = compute_quote(make_rate_table(), seasonal, AvailabilitySet(), request)

    assert result.subtotal_nights == Decimal("880.00")
    assert result.min_nightly_price == Decimal("200.00")
    assert result.max_nightly_price == Decimal("240.00")
    assert result.average_price_per_night == Decimal("220.00")
    assert result.surcharge_totals == {ModifierKind.weekend: Decimal("80.00")}


def test_iter_nights_excludes_check_out():
    assert list(iter_nights(date(2031, 1, 30), date(2031, 2, 2))) == [
        date(2031, 1, 30), date(2031, 1, 31), date(2031, 2, 1),
    ]


def test_configuration_types_reject_invalid_values():
    with pytest.raises(ValidationError):
        make_rate_table(payment_method_surcharge={PaymentMethod.pix: Decimal("-150")})
    with pytest.raises(ValidationError):
        make_rate_table(minimum_nights=0)
    with pytest.raises(ValidationError):
        SeasonalModifierSet(high_season_months=frozenset({13}))
    with pytest.raises(ValidationError):
        SeasonalModifierSet(custom_price_by_date={MON: Decimal("-1")})
    with pytest.raises(ValidationError):
        make_request(guests=0)


def test_negative_total_from_unvalidated_rate_table_is_clamped():
    # model_construct skips the [-100, 100] surcharge check
    rate_table = RateTable.model_construct(
        base_price_per_night=Decimal("200"),
        price_per_extra_guest=Decimal("0"),
        cleaning_fee=Decimal("100"),
        minimum_nights=1,
        base_guest_count=2,
        payment_method_surcharge={PaymentMethod.pix: Decimal("-150")},
    )
    result = compute_quote(rate_table, SeasonalModifierSet(), AvailabilitySet(), make_request())

    assert result.payment_surcharge_amount == Decimal("-900.00")
    assert result.clamped is True
    assert result.total == Decimal("0.00")
