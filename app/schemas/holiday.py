"""Holiday schemas."""
from pydantic import BaseModel


class HolidayResponse(BaseModel):
    id: int
    region_code: str
    month: int
    day: int
    name: str

    class Config:
        from_attributes = True
