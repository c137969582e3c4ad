"""Run the pending reservation expiry once (same job the scheduler runs hourly).
Run: python scripts/expire_pending_reservations.py
"""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import SessionLocal  # noqa: E402
from app.services.reservation_expiry import expire_pending_reservations  # noqa: E402


def main():
    db = SessionLocal()
    try:
        expired = expire_pending_reservations(db)
        print(f"Done. {expired} pending reservation(s) expired.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
