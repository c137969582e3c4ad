"""Append-only audit log of pricing, availability and reservation changes.
No updates or deletes - every record is permanent."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base, JSONType


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(100), nullable=True, index=True)

    # ON DELETE SET NULL so a hard property delete does not fail; message/meta keep the name
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True)
    reservation_id = Column(Integer, ForeignKey("reservations.id", ondelete="SET NULL"), nullable=True, index=True)

    # category: pricing_change | availability_change | status_change
    category = Column(String(32), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # Optional structured data (e.g. old_value, new_value, total)
    meta = Column(JSONType, nullable=True)

    # Who did it, as reported by the gateway (user id or "system")
    actor = Column(String(255), nullable=True)

    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)

    # UTC only - server_default
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
