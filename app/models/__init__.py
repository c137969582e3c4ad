"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
"""
from app.models.property import Property, PropertyCustomPrice, PropertyBlockedDate
from app.models.reservation import Reservation
from app.models.holiday import Holiday
from app.models.audit_log import AuditLog

__all__ = [
    "Property",
    "PropertyCustomPrice",
    "PropertyBlockedDate",
    "Reservation",
    "Holiday",
    "AuditLog",
]
