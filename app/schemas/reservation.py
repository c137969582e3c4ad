"""Reservation schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from pydantic import BaseModel, Field
from app.models.reservation import PaymentMethod, ReservationSource, ReservationStatus


class ReservationCreate(BaseModel):
    property_id: int
    client_name: str = Field(min_length=1, max_length=255)
    client_email: str | None = Field(default=None, max_length=255)
    check_in: date
    check_out: date
    guest_count: int = Field(ge=1)
    payment_method: PaymentMethod = PaymentMethod.pix
    source: ReservationSource = ReservationSource.manual
    special_requests: str = Field(default="", max_length=2000)


class ReservationResponse(BaseModel):
    id: int
    property_id: int
    client_name: str
    client_email: str | None
    check_in: date
    check_out: date
    guest_count: int
    payment_method: PaymentMethod
    status: ReservationStatus
    source: ReservationSource
    total_amount: Decimal
    currency: str
    quote: dict[str, Any]
    special_requests: str | None = None
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
