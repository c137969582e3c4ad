"""Properties and their pricing configuration."""
from sqlalchemy import Column, Integer, String, Numeric, Date, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, JSONType


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(100), nullable=False, index=True)

    name = Column(String(255), nullable=False)  # e.g. "Casa Praia do Rosa"
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    region_code = Column(String(20), nullable=False, default="BR")  # holiday calendar region
    currency = Column(String(3), nullable=False, default="BRL")

    # Rate table
    base_price_per_night = Column(Numeric(12, 2), nullable=False, default=0)
    price_per_extra_guest = Column(Numeric(12, 2), nullable=False, default=0)
    cleaning_fee = Column(Numeric(12, 2), nullable=False, default=0)
    minimum_nights = Column(Integer, nullable=False, default=1)
    base_guest_count = Column(Integer, nullable=False, default=2)
    max_guests = Column(Integer, nullable=True)
    # {"pix": -5, "credit_card": 3.5, ...}; values are percentages
    payment_method_surcharges = Column(JSONType, nullable=True)

    # Seasonal modifiers (percentages)
    weekend_surcharge_pct = Column(Numeric(6, 2), nullable=False, default=0)
    holiday_surcharge_pct = Column(Numeric(6, 2), nullable=False, default=0)
    december_surcharge_pct = Column(Numeric(6, 2), nullable=False, default=0)
    high_season_surcharge_pct = Column(Numeric(6, 2), nullable=False, default=0)
    high_season_months = Column(JSONType, nullable=True)  # [1, 2, 7]

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Soft delete: hidden from listings and quotes; can be reactivated
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    custom_prices = relationship(
        "PropertyCustomPrice", back_populates="property", cascade="all, delete-orphan", order_by="PropertyCustomPrice.date"
    )
    blocked_dates = relationship(
        "PropertyBlockedDate", back_populates="property", cascade="all, delete-orphan", order_by="PropertyBlockedDate.date"
    )


class PropertyCustomPrice(Base):
    """Absolute nightly price for one date; wins over every percentage modifier."""
    __tablename__ = "property_custom_prices"
    __table_args__ = (UniqueConstraint("property_id", "date", name="uq_custom_price_property_date"),)

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    property = relationship("Property", back_populates="custom_prices")


class PropertyBlockedDate(Base):
    __tablename__ = "property_blocked_dates"
    __table_args__ = (UniqueConstraint("property_id", "date", name="uq_blocked_date_property_date"),)

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)  # maintenance, owner use, ...

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    property = relationship("Property", back_populates="blocked_dates")
