"""Computed per-date prices: month calendar and revenue projection."""
from datetime import date
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_tenant_property
from app.models.property import Property
from app.schemas.property import MAX_RANGE_DAYS, PriceCalendar, RevenueProjection
from app.services.holidays import load_holiday_calendar
from app.services.price_calendar import load_price_calendar, project_revenue
from app.services.pricing_config import rate_table_from_property, seasonal_modifiers_from_property

router = APIRouter(prefix="/properties", tags=["pricing"])


def _parse_month(raw: str) -> tuple[int, int]:
    try:
        year, month = (int(part) for part in raw.split("-"))
        date(year, month, 1)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid month {raw!r} (use YYYY-MM)")
    return year, month


@router.get("/{property_id}/price-calendar", response_model=PriceCalendar)
def get_price_calendar(
    month: str = Query(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM"),
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
):
    """Every date of the month with its nightly price, the modifiers behind it, and blocked/reserved flags."""
    year, month_number = _parse_month(month)
    return load_price_calendar(db, prop, year, month_number)


@router.get("/{property_id}/revenue-projection", response_model=RevenueProjection)
def get_revenue_projection(
    start_date: date,
    end_date: date,
    occupancy_rate: Decimal = Query(Decimal("0.7"), ge=0, le=1),
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
):
    """Average computed nightly price over start_date..end_date (inclusive) times the expected occupied nights."""
    if end_date < start_date:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")
    if (end_date - start_date).days >= MAX_RANGE_DAYS:
        raise HTTPException(status_code=422, detail=f"Period is limited to {MAX_RANGE_DAYS} days")
    return project_revenue(
        start_date,
        end_date,
        rate_table_from_property(prop),
        seasonal_modifiers_from_property(prop),
        occupancy_rate,
        holidays=load_holiday_calendar(db, prop.region_code),
        currency=prop.currency,
    )
