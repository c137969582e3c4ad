"""Shared dependencies: DB session, tenant context, request metadata.

Authentication happens upstream (identity provider + gateway). The gateway
forwards the authenticated tenant in X-Tenant-ID and, optionally, the acting
user in X-User-ID.
"""
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.property import Property

_TENANT_ID_MAX_LEN = 100


def get_tenant_id(x_tenant_id: str | None = Header(None)) -> str:
    tenant_id = (x_tenant_id or "").strip()
    if not tenant_id:
        raise HTTPException(status_code=400, detail="X-Tenant-ID header required")
    if len(tenant_id) > _TENANT_ID_MAX_LEN:
        raise HTTPException(status_code=400, detail="Invalid X-Tenant-ID")
    return tenant_id


def get_actor(x_user_id: str | None = Header(None)) -> str | None:
    return (x_user_id or "").strip() or None


def client_info(request: Request) -> tuple[str | None, str | None]:
    """(ip, user_agent) for audit logs."""
    ip = request.client.host if request.client else None
    ua = (request.headers.get("user-agent") or "").strip() or None
    return ip, ua


def get_tenant_property(
    property_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
) -> Property:
    """Active property owned by the current tenant; 404 otherwise (other tenants' rows are invisible)."""
    prop = db.query(Property).filter(
        Property.id == property_id,
        Property.tenant_id == tenant_id,
        Property.deleted_at.is_(None),
    ).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop
