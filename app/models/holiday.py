"""Public holidays per region (recurring month/day)."""
from sqlalchemy import Column, Integer, String, UniqueConstraint
from app.database import Base


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (UniqueConstraint("region_code", "month", "day", name="uq_holidays_region_month_day"),)

    id = Column(Integer, primary_key=True, index=True)
    region_code = Column(String(20), nullable=False, index=True)  # BR, BR-SC, ...

    month = Column(Integer, nullable=False)
    day = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
