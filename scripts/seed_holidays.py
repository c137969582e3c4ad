"""Standalone script to create DB tables and seed Brazilian national holidays.
Run: python scripts/seed_holidays.py [REGION_CODE]
"""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import engine, SessionLocal, Base  # noqa: E402
from app import models  # noqa: F401,E402
from app.seed import seed_holidays, BR_NATIONAL_HOLIDAYS  # noqa: E402

if __name__ == "__main__":
    region = (sys.argv[1] if len(sys.argv) > 1 else "BR").upper()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if seed_holidays(db, region):
            print(f"Seeded {len(BR_NATIONAL_HOLIDAYS)} national holidays for {region}.")
        else:
            print(f"Nothing seeded for {region} (already present or no list for this country).")
    finally:
        db.close()
