"""Reservations and the quote they were priced at."""
from sqlalchemy import Column, Integer, String, Numeric, Date, ForeignKey, DateTime, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, JSONType
import enum


class PaymentMethod(str, enum.Enum):
    pix = "pix"
    credit_card = "credit_card"
    debit_card = "debit_card"
    bank_transfer = "bank_transfer"
    cash = "cash"
    stripe = "stripe"


class ReservationStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    expired = "expired"


class ReservationSource(str, enum.Enum):
    manual = "manual"
    website = "website"
    whatsapp = "whatsapp"
    airbnb = "airbnb"
    booking = "booking"


# Statuses whose nights are unavailable to other reservations
ACTIVE_STATUSES = (ReservationStatus.pending, ReservationStatus.confirmed)


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(100), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)

    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), nullable=True)

    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    guest_count = Column(Integer, nullable=False)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)

    status = Column(SQLEnum(ReservationStatus), nullable=False, default=ReservationStatus.pending, index=True)
    source = Column(SQLEnum(ReservationSource), nullable=False, default=ReservationSource.manual)

    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="BRL")
    # Quote breakdown stored verbatim at creation; never recomputed
    quote = Column(JSONType, nullable=False)

    special_requests = Column(Text, nullable=True)

    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    property = relationship("Property")
