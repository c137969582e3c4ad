"""Read-only view of the tenant's audit trail."""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_tenant_id
from app.schemas.audit_log import AuditLogEntry
from app.services.audit_log import CATEGORIES, query_logs

router = APIRouter(prefix="/audit-logs", tags=["audit-logs"])


def _as_utc(d: datetime | None) -> datetime | None:
    if d is not None and d.tzinfo is None:
        return d.replace(tzinfo=timezone.utc)
    return d


@router.get("/", response_model=list[AuditLogEntry])
def list_audit_logs(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    property_id: int | None = Query(None),
    reservation_id: int | None = Query(None),
    category: str | None = Query(None, description="pricing_change, availability_change or status_change"),
    search: str | None = Query(None, description="Substring of title or message"),
    from_ts: datetime | None = Query(None, description="ISO timestamp, UTC if no offset"),
    to_ts: datetime | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
):
    if category and category.strip() not in CATEGORIES:
        raise HTTPException(status_code=422, detail=f"Unknown category {category!r}")
    rows = query_logs(
        db,
        tenant_id,
        property_id=property_id,
        reservation_id=reservation_id,
        category=category,
        search=search,
        since=_as_utc(from_ts),
        until=_as_utc(to_ts),
    ).limit(limit).all()
    return [AuditLogEntry.model_validate(r) for r in rows]
