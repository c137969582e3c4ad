"""Public holiday lookup used by the quote calculator."""
from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from app.models.holiday import Holiday


def region_chain(region_code: str | None) -> list[str]:
    """Country followed by the region itself: "br-sc" -> ["BR", "BR-SC"]. Later entries win on name clashes."""
    code = (region_code or "").strip().upper()
    if not code:
        return []
    country = code.split("-")[0]
    return [country] if country == code else [country, code]


class HolidayCalendar:
    """Recurring (month, day) holidays plus optional one-off dates (e.g. Carnaval, which moves every year)."""

    def __init__(
        self,
        fixed_dates: Iterable[tuple[int, int, str]] = (),
        extra_dates: Iterable[date] = (),
    ):
        self._fixed = {(month, day): name for month, day, name in fixed_dates}
        self._extra = frozenset(extra_dates)

    def is_holiday(self, day: date) -> bool:
        return (day.month, day.day) in self._fixed or day in self._extra

    def name_for(self, day: date) -> str | None:
        if (day.month, day.day) in self._fixed:
            return self._fixed[(day.month, day.day)]
        if day in self._extra:
            return "Holiday"
        return None

    def __len__(self) -> int:
        return len(self._fixed) + len(self._extra)


def holidays_for_region(db: Session, region_code: str | None) -> list[Holiday]:
    """Holidays of the region and of its country, country rows first."""
    chain = region_chain(region_code)
    if not chain:
        return []
    rows = db.query(Holiday).filter(Holiday.region_code.in_(chain)).all()
    return sorted(rows, key=lambda h: (chain.index(h.region_code), h.month, h.day))


def load_holiday_calendar(db: Session, region_code: str | None) -> HolidayCalendar:
    return HolidayCalendar((h.month, h.day, h.name) for h in holidays_for_region(db, region_code))
