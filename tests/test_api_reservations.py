from decimal import Decimal

from app.models.audit_log import AuditLog


def _book(client, headers, property_id, **body):
    payload = {
        "property_id": property_id,
        "client_name": "  Maria Souza ",
        "client_email": "maria@example.com",
        "check_in": "2031-03-03",
        "check_out": "2031-03-06",
        "guest_count": 3,
        "payment_method": "credit_card",
    }
    payload.update(body)
    return client.post("/reservations/", json=payload, headers=headers)


def test_create_stores_pending_reservation_with_quote(client, headers, property_id, db):
    r = _book(client, headers, property_id)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["status"] == "pending"
    assert data["client_name"] == "Maria Souza"
    assert Decimal(data["total_amount"]) == Decimal("817.60")
    assert data["quote"]["nights"] == 3
    assert Decimal(data["quote"]["total"]) == Decimal("817.60")

    entry = db.query(AuditLog).filter(AuditLog.reservation_id == data["id"]).one()
    assert entry.actor == "user-1"
    assert entry.tenant_id == "tenant-a"
    assert "2031-03-03 to 2031-03-06" in entry.message


def test_overlapping_reservation_is_409(client, headers, property_id):
    assert _book(client, headers, property_id).status_code == 200
    r = _book(client, headers, property_id, check_in="2031-03-05", check_out="2031-03-08")
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["code"] == "date_unavailable"
    assert detail["date"] == "2031-03-05"


def test_back_to_back_stays_are_allowed(client, headers, property_id):
    assert _book(client, headers, property_id).status_code == 200
    r = _book(client, headers, property_id, check_in="2031-03-06", check_out="2031-03-08")
    assert r.status_code == 200, r.text


def test_cancel_frees_nights(client, headers, property_id):
    reservation_id = _book(client, headers, property_id).json()["id"]
    r = client.post(f"/reservations/{reservation_id}/cancel", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"
    assert r.json()["cancelled_at"] is not None

    quote = client.post(
        f"/properties/{property_id}/quote",
        json={"check_in": "2031-03-03", "check_out": "2031-03-06", "guest_count": 2, "payment_method": "pix"},
        headers=headers,
    )
    assert quote.status_code == 200


def test_rejected_quote_creates_nothing(client, headers, property_id):
    r = _book(client, headers, property_id, check_out="2031-03-04")
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "minimum_stay_not_met"
    assert client.get("/reservations/", headers=headers).json() == []


def test_status_transitions(client, headers, property_id):
    reservation_id = _book(client, headers, property_id).json()["id"]

    confirmed = client.post(f"/reservations/{reservation_id}/confirm", headers=headers)
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"
    assert confirmed.json()["confirmed_at"] is not None

    assert client.post(f"/reservations/{reservation_id}/confirm", headers=headers).status_code == 409
    assert client.post(f"/reservations/{reservation_id}/cancel", headers=headers).status_code == 200
    assert client.post(f"/reservations/{reservation_id}/confirm", headers=headers).status_code == 409


def test_stored_total_survives_price_changes(client, headers, property_id):
    reservation_id = _book(client, headers, property_id).json()["id"]
    client.put(f"/properties/{property_id}", json={"base_price_per_night": "999"}, headers=headers)
    r = client.get(f"/reservations/{reservation_id}", headers=headers)
    assert Decimal(r.json()["total_amount"]) == Decimal("817.60")


def test_list_filters(client, headers, property_id):
    first = _book(client, headers, property_id).json()["id"]
    second = _book(client, headers, property_id, check_in="2031-05-05", check_out="2031-05-08").json()["id"]
    client.post(f"/reservations/{second}/confirm", headers=headers)

    def ids(**params):
        r = client.get("/reservations/", params=params, headers=headers)
        assert r.status_code == 200
        return [row["id"] for row in r.json()]

    assert ids() == [first, second]
    assert ids(status="confirmed") == [second]
    assert ids(check_in_from="2031-04-01") == [second]
    assert ids(check_in_to="2031-04-01") == [first]
    assert ids(property_id=property_id + 1) == []


def test_reservations_are_tenant_scoped(client, headers, other_headers, property_id):
    reservation_id = _book(client, headers, property_id).json()["id"]
    assert client.get(f"/reservations/{reservation_id}", headers=other_headers).status_code == 404
    assert client.get("/reservations/", headers=other_headers).json() == []
    assert _book(client, other_headers, property_id, check_in="2031-06-02", check_out="2031-06-05").status_code == 404
