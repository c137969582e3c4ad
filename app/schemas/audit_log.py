"""Audit log read model."""
from datetime import datetime
from typing import Any
from pydantic import BaseModel


class AuditLogEntry(BaseModel):
    id: int
    property_id: int | None
    reservation_id: int | None
    category: str
    title: str
    message: str
    meta: dict[str, Any] | None = None
    actor: str | None
    ip_address: str | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
