import os

# Configure before any app import: settings are cached on first use
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RESERVATION_EXPIRY_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app import models  # noqa: F401
from app.main import app
from app.seed import seed_holidays

TENANT_ID = "tenant-a"
OTHER_TENANT_ID = "tenant-b"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    seed_holidays(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-Tenant-ID": TENANT_ID, "X-User-ID": "user-1"}


@pytest.fixture
def other_headers():
    return {"X-Tenant-ID": OTHER_TENANT_ID}


@pytest.fixture
def property_payload():
    return {
        "name": "Casa Praia do Rosa",
        "city": "Imbituba",
        "state": "SC",
        "base_price_per_night": "200",
        "price_per_extra_guest": "30",
        "cleaning_fee": "100",
        "minimum_nights": 2,
        "base_guest_count": 2,
        "max_guests": 6,
        "weekend_surcharge_pct": "20",
        "holiday_surcharge_pct": "50",
        "december_surcharge_pct": "10",
        "high_season_surcharge_pct": "25",
        "high_season_months": [1, 2],
        "payment_method_surcharges": {"pix": "-5", "credit_card": "4"},
    }


@pytest.fixture
def property_id(client, headers, property_payload):
    r = client.post("/properties/", json=property_payload, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()["id"]
