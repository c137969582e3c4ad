from decimal import Decimal

import pytest


def _quote(client, headers, property_id, **body):
    payload = {"check_in": "2031-03-03", "check_out": "2031-03-06", "guest_count": 3, "payment_method": "cash"}
    payload.update(body)
    return client.post(f"/properties/{property_id}/quote", json=payload, headers=headers)


def test_quote_returns_full_breakdown(client, headers, property_id):
    r = _quote(client, headers, property_id)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["nights"] == 3
    assert data["extra_guests"] == 1
    assert data["currency"] == "BRL"
    assert Decimal(data["subtotal_nights"]) == Decimal("600")
    assert Decimal(data["extra_guest_fee_total"]) == Decimal("90")
    assert Decimal(data["cleaning_fee"]) == Decimal("100")
    assert Decimal(data["total"]) == Decimal("790")
    assert [n["date"] for n in data["nightly"]] == ["2031-03-03", "2031-03-04", "2031-03-05"]


@pytest.mark.parametrize("method, total", [
    ("pix", Decimal("755.50")),
    ("credit_card", Decimal("817.60")),
    ("debit_card", Decimal("790.00")),
])
def test_payment_method_surcharge(client, headers, property_id, method, total):
    r = _quote(client, headers, property_id, payment_method=method)
    assert r.status_code == 200, r.text
    assert Decimal(r.json()["total"]) == total


def test_quote_applies_seeded_national_holiday(client, headers, property_id):
    # 2031-04-21 (Tiradentes) is a Monday
    r = _quote(client, headers, property_id, check_in="2031-04-21", check_out="2031-04-23", guest_count=2)
    assert r.status_code == 200, r.text
    nightly = r.json()["nightly"]
    assert Decimal(nightly[0]["price"]) == Decimal("300")
    assert nightly[0]["modifiers_applied"][0]["kind"] == "holiday"
    assert Decimal(nightly[1]["price"]) == Decimal("200")
    assert Decimal(r.json()["total"]) == Decimal("600")


def test_blocked_date_is_409_with_date(client, headers, property_id):
    client.put(f"/properties/{property_id}/blocked-dates", json={"dates": ["2031-03-04"]}, headers=headers)
    r = _quote(client, headers, property_id)
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["code"] == "date_unavailable"
    assert detail["date"] == "2031-03-04"


def test_minimum_stay_is_422(client, headers, property_id):
    r = _quote(client, headers, property_id, check_out="2031-03-04")
    assert r.status_code == 422
    detail = r.json()["detail"]
    assert detail["code"] == "minimum_stay_not_met"
    assert (detail["required"], detail["actual"]) == (2, 1)


def test_guest_limit_is_422(client, headers, property_id):
    r = _quote(client, headers, property_id, guest_count=7)
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "guest_limit_exceeded"


def test_reversed_dates_are_422(client, headers, property_id):
    r = _quote(client, headers, property_id, check_in="2031-03-06", check_out="2031-03-03")
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "invalid_date_range"


def test_unknown_payment_method_is_rejected_by_validation(client, headers, property_id):
    r = _quote(client, headers, property_id, payment_method="boleto")
    assert r.status_code == 422


def test_custom_price_reaches_quote(client, headers, property_id):
    client.put(
        f"/properties/{property_id}/custom-prices",
        json={"prices": [{"date": "2031-03-04", "price": "450"}]},
        headers=headers,
    )
    r = _quote(client, headers, property_id, guest_count=2)
    data = r.json()
    assert Decimal(data["nightly"][1]["price"]) == Decimal("450")
    assert Decimal(data["subtotal_nights"]) == Decimal("850")
    assert Decimal(data["surcharge_totals"]["custom_price"]) == Decimal("250")


def test_quote_is_tenant_scoped(client, other_headers, property_id):
    r = _quote(client, other_headers, property_id)
    assert r.status_code == 404


def test_quote_requires_tenant_header(client, property_id):
    r = _quote(client, {}, property_id)
    assert r.status_code == 400


def test_subregion_property_gets_national_holidays(client, headers, property_payload):
    payload = dict(property_payload, region_code="br-sc")
    prop = client.post("/properties/", json=payload, headers=headers).json()
    assert prop["region_code"] == "BR-SC"

    r = _quote(client, headers, prop["id"], check_in="2031-04-21", check_out="2031-04-23", guest_count=2)
    assert r.status_code == 200, r.text
    night = r.json()["nightly"][0]
    assert Decimal(night["price"]) == Decimal("300")
    assert [m["kind"] for m in night["modifiers_applied"]] == ["holiday"]
