"""Calendar domain schemas"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator


class HolidayResponse(BaseModel):
    date: date
    name: str


class DayInfoResponse(BaseModel):
    """Everything the vacation and calendar screens need to know about a day"""

    date: date
    isHoliday: bool
    holidayName: Optional[str] = None
    isRestDay: bool
    isBeforeRestDay: bool
    isTwoDaysBeforeRestDay: bool


class LocalHolidayCreate(BaseModel):
    name: str
    day: int
    month: int
    year: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Nome do feriado é obrigatório")
        return v

    @model_validator(mode="after")
    def validate_day_of_month(self):
        # 2024 is a leap year, so 29/02 is accepted for recurring holidays
        try:
            date(self.year or 2024, self.month, self.day)
        except ValueError as e:
            raise ValueError("Data do feriado inválida") from e
        return self


class LocalHolidayResponse(BaseModel):
    id: int
    name: str
    day: int
    month: int
    year: Optional[int] = None

    class Config:
        from_attributes = True
