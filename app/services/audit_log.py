"""Append-only audit trail for pricing, availability and reservation status changes.

Rows are only ever inserted; nothing here updates or deletes them.
"""
from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog

CATEGORY_PRICING_CHANGE = "pricing_change"
CATEGORY_AVAILABILITY_CHANGE = "availability_change"
CATEGORY_STATUS_CHANGE = "status_change"
CATEGORIES = (CATEGORY_PRICING_CHANGE, CATEGORY_AVAILABILITY_CHANGE, CATEGORY_STATUS_CHANGE)

# Column limits (match app.models.audit_log)
_LIMITS = {
    "category": 32,
    "title": 255,
    "tenant_id": 100,
    "actor": 255,
    "ip_address": 64,
    "user_agent": 500,
}
_MESSAGE_LEN = 100_000


def _clip(value: str | None, field: str) -> str | None:
    if not value:
        return None
    return str(value)[: _LIMITS[field]].strip() or None


def _json_key(k: Any) -> str:
    if isinstance(k, enum.Enum):
        return str(k.value)
    if isinstance(k, (datetime, date)):
        return k.isoformat()
    return str(k)


def _json_value(v: Any) -> Any:
    """Money stays exact as a string; dates as ISO; enums as their value."""
    if v is None or isinstance(v, (str, int, float, bool)):
        return v
    if isinstance(v, Decimal):
        return str(v)
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if isinstance(v, enum.Enum):
        return v.value
    if isinstance(v, dict):
        return {_json_key(k): _json_value(x) for k, x in v.items()}
    if isinstance(v, (set, frozenset)):
        return sorted((_json_value(x) for x in v), key=str)
    if isinstance(v, (list, tuple)):
        return [_json_value(x) for x in v]
    return str(v)


def sanitize_meta(meta: dict[str, Any] | None) -> dict[str, Any] | None:
    if meta is None:
        return None
    return _json_value(dict(meta))


def create_log(
    db: Session,
    category: str,
    title: str,
    message: str,
    *,
    tenant_id: str | None = None,
    property_id: int | None = None,
    reservation_id: int | None = None,
    actor: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    meta: dict[str, Any] | None = None,
) -> AuditLog:
    """Add one audit row and flush it. The caller owns the transaction and commits."""
    entry = AuditLog(
        category=_clip(category, "category") or CATEGORY_STATUS_CHANGE,
        title=_clip(title, "title") or "-",
        message=(message or "")[:_MESSAGE_LEN].strip() or "-",
        tenant_id=_clip(tenant_id, "tenant_id"),
        property_id=property_id,
        reservation_id=reservation_id,
        actor=_clip(actor, "actor"),
        ip_address=_clip(ip_address, "ip_address"),
        user_agent=_clip(user_agent, "user_agent"),
        meta=sanitize_meta(meta),
    )
    db.add(entry)
    db.flush()
    return entry


def query_logs(
    db: Session,
    tenant_id: str,
    *,
    property_id: int | None = None,
    reservation_id: int | None = None,
    category: str | None = None,
    search: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
):
    """Tenant's audit rows, newest first."""
    q = db.query(AuditLog).filter(AuditLog.tenant_id == tenant_id)
    if property_id is not None:
        q = q.filter(AuditLog.property_id == property_id)
    if reservation_id is not None:
        q = q.filter(AuditLog.reservation_id == reservation_id)
    if category and category.strip():
        q = q.filter(AuditLog.category == category.strip())
    if search and search.strip():
        term = f"%{search.strip()}%"
        q = q.filter(AuditLog.title.ilike(term) | AuditLog.message.ilike(term))
    if since is not None:
        q = q.filter(AuditLog.created_at >= since)
    if until is not None:
        q = q.filter(AuditLog.created_at <= until)
    return q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
