"""Holidays (read-only, pre-seeded)."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.config import get_settings
from app.database import get_db
from app.schemas.holiday import HolidayResponse
from app.services.holidays import holidays_for_region

router = APIRouter(prefix="/holidays", tags=["holidays"])
settings = get_settings()


@router.get("/", response_model=list[HolidayResponse])
def list_holidays(
    region_code: str | None = Query(None, description="Holiday region, e.g. BR or BR-SC (includes national holidays)"),
    db: Session = Depends(get_db),
):
    rows = holidays_for_region(db, region_code or settings.default_holiday_region)
    return [HolidayResponse.model_validate(h) for h in sorted(rows, key=lambda h: (h.month, h.day, h.region_code))]
