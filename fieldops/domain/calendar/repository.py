"""Calendar repository - Operator-maintained local holidays"""

from typing import Optional

from sqlalchemy.orm import Session

from ...config import COMPUTE_MOVABLE_HOLIDAYS
from ...models import LocalHoliday
from .holidays import HolidayCalendar, LocalHolidayEntry


class CalendarRepository:
    @staticmethod
    def get_local_holidays(db: Session) -> list[LocalHoliday]:
        return db.query(LocalHoliday).order_by(LocalHoliday.month, LocalHoliday.day).all()

    @staticmethod
    def get_local_holiday(db: Session, holiday_id: int) -> Optional[LocalHoliday]:
        return db.query(LocalHoliday).filter(LocalHoliday.id == holiday_id).first()

    @staticmethod
    def create_local_holiday(db: Session, **data) -> LocalHoliday:
        holiday = LocalHoliday(**data)
        db.add(holiday)
        db.commit()
        db.refresh(holiday)
        return holiday

    @staticmethod
    def delete_local_holiday(db: Session, holiday: LocalHoliday) -> None:
        db.delete(holiday)
        db.commit()


def load_calendar(db: Session) -> HolidayCalendar:
    """Holiday calendar including the local holidays stored in the database"""
    entries = [
        LocalHolidayEntry(month=h.month, day=h.day, name=h.name, year=h.year)
        for h in CalendarRepository.get_local_holidays(db)
    ]
    return HolidayCalendar(local_holidays=entries, compute_movable=COMPUTE_MOVABLE_HOLIDAYS)
