from app.schemas.pricing import (
    AvailabilitySet, QuoteBreakdown, QuoteError, QuoteRequest, RateTable, SeasonalModifierSet,
)
from app.schemas.property import PropertyCreate, PropertyResponse, PropertyUpdate, PricingConfig
from app.schemas.reservation import ReservationCreate, ReservationResponse
from app.schemas.holiday import HolidayResponse
from app.schemas.audit_log import AuditLogEntry
from app.schemas.property import CustomPriceRangeUpdate, PriceCalendar, RevenueProjection
