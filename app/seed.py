"""Seed Brazilian national holidays (fixed-date ones)."""
import logging
from sqlalchemy.orm import Session
from app.models.holiday import Holiday

logger = logging.getLogger(__name__)

SEEDED_COUNTRY = "BR"
BR_NATIONAL_HOLIDAYS = [
    (1, 1, "Ano Novo"),
    (4, 21, "Tiradentes"),
    (5, 1, "Dia do Trabalho"),
    (9, 7, "Independência"),
    (10, 12, "Nossa Senhora Aparecida"),
    (11, 2, "Finados"),
    (11, 15, "Proclamação da República"),
    (12, 25, "Natal"),
]


def seed_holidays(db: Session, region_code: str = SEEDED_COUNTRY) -> bool:
    """Insert the national list under "BR" for BR or any BR-xx region. Returns True when rows were added.

    Subregions inherit national holidays through the country lookup, so they are never seeded directly.
    """
    country = (region_code or "").strip().upper().split("-")[0]
    if country != SEEDED_COUNTRY:
        logger.warning("No holiday list for region %r; nothing seeded", region_code)
        return False
    if db.query(Holiday).filter(Holiday.region_code == country).count() > 0:
        return False
    for month, day, name in BR_NATIONAL_HOLIDAYS:
        db.add(Holiday(region_code=country, month=month, day=day, name=name))
    db.commit()
    return True
