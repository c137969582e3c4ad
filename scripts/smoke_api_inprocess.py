"""
Backend API smoke run, in-process via TestClient (no separate server).
Uses whatever DATABASE_URL points at; run against a scratch database.
Run: python scripts/smoke_api_inprocess.py
"""
import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fastapi.testclient import TestClient  # noqa: E402
from app.database import SessionLocal, engine, Base  # noqa: E402
from app import models  # noqa: F401,E402
from app.main import app  # noqa: E402
from app.seed import seed_holidays  # noqa: E402

Base.metadata.create_all(bind=engine)
db = SessionLocal()
try:
    seed_holidays(db)
finally:
    db.close()

client = TestClient(app)
TENANT = {"X-Tenant-ID": "smoke-tenant", "X-User-ID": "smoke-script"}
passed = failed = 0
property_id = reservation_id = None


def req(method, path, body=None):
    kwargs = {"headers": {"Accept": "application/json", **TENANT}}
    if body:
        kwargs["json"] = body
    r = client.request(method, path, **kwargs)
    if r.status_code >= 400:
        raise RuntimeError(f"HTTP {r.status_code}: {r.text}")
    return r.json() if r.content else {}


def test(name, fn):
    global passed, failed
    try:
        fn()
        print(f"  OK  {name}")
        passed += 1
    except Exception as e:
        print(f"  FAIL {name}: {e}")
        failed += 1


def main():
    global property_id, reservation_id
    print("StayQuote API smoke run (in-process)\n" + "=" * 50)

    test("GET /", lambda: req("GET", "/"))
    test("GET /health", lambda: req("GET", "/health"))
    test("GET /holidays/", lambda: req("GET", "/holidays/?region_code=BR"))

    print("\n--- Properties ---")
    def add_prop():
        global property_id
        property_id = req("POST", "/properties/", {
            "name": "Casa Smoke", "city": "Florianópolis", "state": "SC",
            "base_price_per_night": "200", "cleaning_fee": "100", "price_per_extra_guest": "30",
            "weekend_surcharge_pct": "20", "payment_method_surcharges": {"pix": "-5", "credit_card": "4"}})["id"]
    test("POST /properties/", add_prop)
    test("GET /properties/", lambda: req("GET", "/properties/"))
    test("GET /properties/{id}/pricing", lambda: req("GET", f"/properties/{property_id}/pricing"))
    test("PUT /properties/{id}/custom-prices", lambda: req("PUT", f"/properties/{property_id}/custom-prices", {
        "prices": [{"date": "2031-12-31", "price": "900"}]}))
    test("PUT /properties/{id}/blocked-dates", lambda: req("PUT", f"/properties/{property_id}/blocked-dates", {
        "dates": ["2031-07-01"], "reason": "maintenance"}))

    print("\n--- Quotes ---")
    test("POST /properties/{id}/quote", lambda: req("POST", f"/properties/{property_id}/quote", {
        "check_in": "2031-03-03", "check_out": "2031-03-06", "guest_count": 3, "payment_method": "pix"}))

    print("\n--- Reservations ---")
    def add_reservation():
        global reservation_id
        reservation_id = req("POST", "/reservations/", {
            "property_id": property_id, "client_name": "Smoke Guest", "check_in": "2031-03-03",
            "check_out": "2031-03-06", "guest_count": 2, "payment_method": "credit_card"})["id"]
    test("POST /reservations/", add_reservation)
    test("GET /reservations/", lambda: req("GET", "/reservations/"))
    test("POST /reservations/{id}/confirm", lambda: req("POST", f"/reservations/{reservation_id}/confirm"))
    test("POST /reservations/{id}/cancel", lambda: req("POST", f"/reservations/{reservation_id}/cancel"))

    print("\n" + "=" * 50)
    print(f"Passed: {passed}  Failed: {failed}  Total: {passed + failed}")
    sys.exit(0 if failed == 0 else 1)


if __name__ == "__main__":
    main()
