"""Expire pending reservations that were not confirmed in time, releasing their nights."""
import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from app.config import get_settings
from app.database import SessionLocal
from app.models.reservation import Reservation, ReservationStatus
from app.services.audit_log import create_log, CATEGORY_STATUS_CHANGE

settings = get_settings()
logger = logging.getLogger(__name__)


def get_stale_pending_reservations(db: Session, now: datetime | None = None) -> list[Reservation]:
    """Pending reservations created more than pending_reservation_ttl_hours ago."""
    now = now or datetime.now(timezone.utc)
    threshold = now - timedelta(hours=settings.pending_reservation_ttl_hours)
    return db.query(Reservation).filter(
        Reservation.status == ReservationStatus.pending,
        Reservation.created_at < threshold,
    ).all()


def expire_pending_reservations(db: Session, now: datetime | None = None) -> int:
    """Mark stale pending reservations expired and log each one. Returns the number expired."""
    stale = get_stale_pending_reservations(db, now)
    for r in stale:
        r.status = ReservationStatus.expired
        create_log(
            db,
            CATEGORY_STATUS_CHANGE,
            "Reservation expired",
            f"Reservation {r.id} was not confirmed within {settings.pending_reservation_ttl_hours}h and expired.",
            tenant_id=r.tenant_id,
            property_id=r.property_id,
            reservation_id=r.id,
            actor="system",
            meta={"old_value": ReservationStatus.pending, "new_value": ReservationStatus.expired},
        )
    db.commit()
    return len(stale)


def run_pending_reservation_expiry_job() -> None:
    """Scheduled entry point (hourly)."""
    if not settings.reservation_expiry_enabled:
        return
    db = SessionLocal()
    try:
        expired = expire_pending_reservations(db)
        if expired:
            logger.info("Reservation expiry: %d pending reservation(s) expired.", expired)
    finally:
        db.close()
