"""Reservations: priced at creation, stored with their quote breakdown."""
import logging
from datetime import date, datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.property import Property
from app.models.reservation import Reservation, ReservationStatus
from app.schemas.pricing import QuoteError, QuoteRequest
from app.schemas.reservation import ReservationCreate, ReservationResponse
from app.dependencies import client_info, get_actor, get_tenant_id
from app.routers.quotes import quote_error_exception
from app.services.audit_log import create_log, CATEGORY_STATUS_CHANGE
from app.services.pricing_config import quote_property

router = APIRouter(prefix="/reservations", tags=["reservations"])
logger = logging.getLogger(__name__)

# status -> statuses it may move to
_TRANSITIONS = {
    ReservationStatus.pending: {ReservationStatus.confirmed, ReservationStatus.cancelled, ReservationStatus.expired},
    ReservationStatus.confirmed: {ReservationStatus.cancelled},
    ReservationStatus.cancelled: set(),
    ReservationStatus.expired: set(),
}


def can_transition(current: ReservationStatus, target: ReservationStatus) -> bool:
    return target in _TRANSITIONS.get(current, set())


def _get_tenant_reservation(db: Session, tenant_id: str, reservation_id: int) -> Reservation:
    r = db.query(Reservation).filter(
        Reservation.id == reservation_id,
        Reservation.tenant_id == tenant_id,
    ).first()
    if not r:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return r


@router.post("/", response_model=ReservationResponse)
def create_reservation(
    request: Request,
    data: ReservationCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str | None = Depends(get_actor),
):
    # Row lock on the property serialises concurrent bookings for it (no-op on SQLite)
    prop = db.query(Property).filter(
        Property.id == data.property_id,
        Property.tenant_id == tenant_id,
        Property.deleted_at.is_(None),
    ).with_for_update().first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")

    quote = quote_property(
        db,
        prop,
        QuoteRequest(
            check_in=data.check_in,
            check_out=data.check_out,
            guest_count=data.guest_count,
            payment_method=data.payment_method,
        ),
    )
    if isinstance(quote, QuoteError):
        db.rollback()
        raise quote_error_exception(quote)

    reservation = Reservation(
        tenant_id=tenant_id,
        property_id=prop.id,
        client_name=data.client_name.strip(),
        client_email=(data.client_email or "").strip() or None,
        check_in=data.check_in,
        check_out=data.check_out,
        guest_count=data.guest_count,
        payment_method=data.payment_method,
        status=ReservationStatus.pending,
        source=data.source,
        total_amount=quote.total,
        currency=quote.currency,
        quote=quote.model_dump(mode="json"),
        special_requests=data.special_requests or None,
    )
    db.add(reservation)
    db.flush()
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_STATUS_CHANGE,
        "Reservation created",
        f"Reservation {reservation.id} created for property {prop.id}, {data.check_in} to {data.check_out}, total {quote.currency} {quote.total}.",
        tenant_id=tenant_id,
        property_id=prop.id,
        reservation_id=reservation.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
        meta={"total": quote.total, "nights": quote.nights, "payment_method": data.payment_method, "source": data.source},
    )
    db.commit()
    db.refresh(reservation)
    logger.info("Reservation %s created (property=%s total=%s)", reservation.id, prop.id, quote.total)
    return ReservationResponse.model_validate(reservation)


@router.get("/", response_model=list[ReservationResponse])
def list_reservations(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    status: ReservationStatus | None = Query(None),
    property_id: int | None = Query(None),
    check_in_from: date | None = Query(None, description="Check-in on or after this date"),
    check_in_to: date | None = Query(None, description="Check-in on or before this date"),
):
    q = db.query(Reservation).filter(Reservation.tenant_id == tenant_id)
    if status:
        q = q.filter(Reservation.status == status)
    if property_id is not None:
        q = q.filter(Reservation.property_id == property_id)
    if check_in_from:
        q = q.filter(Reservation.check_in >= check_in_from)
    if check_in_to:
        q = q.filter(Reservation.check_in <= check_in_to)
    return [ReservationResponse.model_validate(r) for r in q.order_by(Reservation.check_in, Reservation.id).all()]


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return ReservationResponse.model_validate(_get_tenant_reservation(db, tenant_id, reservation_id))


def _change_status(
    request: Request,
    db: Session,
    tenant_id: str,
    actor: str | None,
    reservation_id: int,
    target: ReservationStatus,
) -> Reservation:
    r = _get_tenant_reservation(db, tenant_id, reservation_id)
    old = r.status
    if not can_transition(old, target):
        raise HTTPException(status_code=409, detail=f"Cannot change reservation from {old.value} to {target.value}")
    now = datetime.now(timezone.utc)
    r.status = target
    if target == ReservationStatus.confirmed:
        r.confirmed_at = now
    elif target == ReservationStatus.cancelled:
        r.cancelled_at = now
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_STATUS_CHANGE,
        f"Reservation {target.value}",
        f"Reservation {r.id} changed from {old.value} to {target.value}.",
        tenant_id=tenant_id,
        property_id=r.property_id,
        reservation_id=r.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
        meta={"old_value": old, "new_value": target},
    )
    db.commit()
    db.refresh(r)
    return r


@router.post("/{reservation_id}/confirm", response_model=ReservationResponse)
def confirm_reservation(
    reservation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str | None = Depends(get_actor),
):
    r = _change_status(request, db, tenant_id, actor, reservation_id, ReservationStatus.confirmed)
    return ReservationResponse.model_validate(r)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
def cancel_reservation(
    reservation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str | None = Depends(get_actor),
):
    """Cancelling frees the reservation's nights for new quotes."""
    r = _change_status(request, db, tenant_id, actor, reservation_id, ReservationStatus.cancelled)
    return ReservationResponse.model_validate(r)
