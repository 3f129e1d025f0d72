"""Calendar router - Holiday lookups and local holiday maintenance"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context
from ...database import get_db
from ...permissions import Capability, require
from ...shared.validators import CalendarDate
from .business_days import (
    is_before_weekend_or_holiday,
    is_two_days_before_weekend_or_holiday,
    is_weekend_or_holiday,
)
from .repository import CalendarRepository, load_calendar
from .schemas import DayInfoResponse, HolidayResponse, LocalHolidayCreate, LocalHolidayResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calendar", tags=["Calendar"])


@router.get("/holidays", response_model=list[HolidayResponse])
async def list_holidays(
    year: int = Query(..., ge=1900, le=2200),
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """All holidays of a year, sorted by date"""
    calendar = load_calendar(db)
    return [HolidayResponse(date=day, name=name) for day, name in calendar.holidays_in_year(year)]


@router.get("/days/{day}", response_model=DayInfoResponse)
async def get_day_info(
    day: CalendarDate,
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """Holiday and rest-day flags for one date"""
    calendar = load_calendar(db)
    return DayInfoResponse(
        date=day,
        isHoliday=calendar.is_holiday(day),
        holidayName=calendar.holiday_name(day),
        isRestDay=is_weekend_or_holiday(day, calendar),
        isBeforeRestDay=is_before_weekend_or_holiday(day, calendar),
        isTwoDaysBeforeRestDay=is_two_days_before_weekend_or_holiday(day, calendar),
    )


# ============================================================================
# LOCAL HOLIDAYS
# ============================================================================


@router.get("/local-holidays", response_model=list[LocalHolidayResponse])
async def list_local_holidays(
    session: SessionContext = Depends(require(Capability.ACCESS_CALENDAR)),
    db: Session = Depends(get_db),
):
    return CalendarRepository.get_local_holidays(db)


@router.post("/local-holidays", response_model=LocalHolidayResponse, status_code=201)
async def create_local_holiday(
    data: LocalHolidayCreate,
    session: SessionContext = Depends(require(Capability.EDIT_CALENDAR)),
    db: Session = Depends(get_db),
):
    holiday = CalendarRepository.create_local_holiday(db, **data.model_dump())
    logger.info(f"✅ Local holiday added by {session.email}: {holiday.name} {holiday.day}/{holiday.month}")
    return holiday


@router.delete("/local-holidays/{holiday_id}")
async def delete_local_holiday(
    holiday_id: int,
    session: SessionContext = Depends(require(Capability.EDIT_CALENDAR)),
    db: Session = Depends(get_db),
):
    holiday = CalendarRepository.get_local_holiday(db, holiday_id)
    if not holiday:
        raise HTTPException(status_code=404, detail="Feriado não encontrado")
    CalendarRepository.delete_local_holiday(db, holiday)
    logger.info(f"🗑️ Local holiday {holiday_id} removed by {session.email}")
    return {"message": "Feriado removido"}
