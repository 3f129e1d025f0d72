"""Vacations router - FastAPI endpoints for vacations, time off and time bank"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context
from ...database import get_db
from ...models import TimeOff, Vacation
from ...permissions import Capability, require
from ...shared.validators import CalendarDate
from .schemas import (
    AgentOnVacationResponse,
    TimeBankAdjustment,
    TimeBankResponse,
    TimeBankTransactionResponse,
    TimeOffCreate,
    TimeOffResponse,
    TimeOffUpdate,
    VacationCreate,
    VacationReminderResponse,
    VacationResponse,
    VacationUpdate,
)
from .service import TimeBankService, TimeOffService, VacationService

router = APIRouter(prefix="/vacations", tags=["Vacations"])


def get_vacation_service(db: Session = Depends(get_db)) -> VacationService:
    """Dependency injection for VacationService"""
    return VacationService(db)


def get_time_off_service(db: Session = Depends(get_db)) -> TimeOffService:
    return TimeOffService(db)


def get_time_bank_service(db: Session = Depends(get_db)) -> TimeBankService:
    return TimeBankService(db)


def _vacation_response(vacation: Vacation) -> VacationResponse:
    return VacationResponse(
        id=vacation.id,
        agent_id=vacation.agent_id,
        agent_name=vacation.agent.name if vacation.agent else None,
        start_date=vacation.start_date,
        end_date=vacation.end_date,
        days=vacation.days,
        period_number=vacation.period_number,
        expiry_date=vacation.expiry_date,
        deadline=vacation.deadline,
        notes=vacation.notes,
        version=vacation.version,
    )


def _time_off_response(time_off: TimeOff, service: TimeOffService) -> TimeOffResponse:
    return TimeOffResponse(
        id=time_off.id,
        date=time_off.date,
        end_date=time_off.end_date,
        agent_id=time_off.agent_id,
        agent_name=time_off.agent.name if time_off.agent else None,
        type=time_off.type,
        approved=time_off.approved,
        bonus_reason=time_off.bonus_reason,
        leave_days=time_off.leave_days,
        working_days=service.working_days(time_off),
    )


# ============================================================================
# TIME OFF
# ============================================================================


@router.get("/time-off", response_model=list[TimeOffResponse])
async def list_time_off(
    start: Optional[CalendarDate] = Query(None),
    end: Optional[CalendarDate] = Query(None),
    session: SessionContext = Depends(get_session_context),
    service: TimeOffService = Depends(get_time_off_service),
):
    return [_time_off_response(t, service) for t in service.get_time_off(session, start, end)]


@router.post("/time-off", response_model=TimeOffResponse, status_code=201)
async def create_time_off(
    data: TimeOffCreate,
    session: SessionContext = Depends(require(Capability.EDIT_VACATIONS)),
    service: TimeOffService = Depends(get_time_off_service),
):
    return _time_off_response(service.create_time_off(data, session), service)


@router.put("/time-off/{time_off_id}", response_model=TimeOffResponse)
async def update_time_off(
    time_off_id: str,
    data: TimeOffUpdate,
    session: SessionContext = Depends(require(Capability.EDIT_VACATIONS)),
    service: TimeOffService = Depends(get_time_off_service),
):
    return _time_off_response(service.update_time_off(time_off_id, data, session), service)


@router.delete("/time-off/{time_off_id}")
async def delete_time_off(
    time_off_id: str,
    session: SessionContext = Depends(require(Capability.EDIT_VACATIONS)),
    service: TimeOffService = Depends(get_time_off_service),
):
    return service.delete_time_off(time_off_id, session)


# ============================================================================
# TIME BANK
# ============================================================================


@router.get("/time-bank", response_model=list[TimeBankResponse])
async def list_time_bank(
    session: SessionContext = Depends(get_session_context),
    service: TimeBankService = Depends(get_time_bank_service),
):
    return service.get_balances(session)


@router.get("/time-bank/{agent_id}/transactions", response_model=list[TimeBankTransactionResponse])
async def list_time_bank_transactions(
    agent_id: str,
    session: SessionContext = Depends(get_session_context),
    service: TimeBankService = Depends(get_time_bank_service),
):
    return service.get_transactions(agent_id)


@router.post("/time-bank/{agent_id}/adjust", response_model=TimeBankResponse)
async def adjust_time_bank(
    agent_id: str,
    data: TimeBankAdjustment,
    session: SessionContext = Depends(require(Capability.EDIT_VACATIONS)),
    service: TimeBankService = Depends(get_time_bank_service),
):
    """Manual credit or correction of hours and bonus days"""
    return service.adjust(agent_id, data, session)


# ============================================================================
# VACATIONS
# ============================================================================


@router.get("/reminders", response_model=list[VacationReminderResponse])
async def list_vacation_reminders(
    session: SessionContext = Depends(get_session_context),
    service: VacationService = Depends(get_vacation_service),
):
    """Vacations starting 30 or 60 days from today"""
    return service.get_upcoming_vacation_reminders(session)


@router.get("/agents/{agent_id}/on-vacation", response_model=AgentOnVacationResponse)
async def agent_on_vacation(
    agent_id: str,
    day: CalendarDate = Query(..., alias="date"),
    session: SessionContext = Depends(get_session_context),
    service: VacationService = Depends(get_vacation_service),
):
    return AgentOnVacationResponse(
        agentId=agent_id, date=day, onVacation=service.is_agent_on_vacation(agent_id, day)
    )


@router.get("", response_model=list[VacationResponse])
async def list_vacations(
    agent_id: Optional[str] = Query(None, alias="agentId"),
    session: SessionContext = Depends(get_session_context),
    service: VacationService = Depends(get_vacation_service),
):
    return [_vacation_response(v) for v in service.get_vacations(session, agent_id)]


@router.post("", response_model=VacationResponse, status_code=201)
async def create_vacation(
    data: VacationCreate,
    session: SessionContext = Depends(require(Capability.EDIT_VACATIONS)),
    service: VacationService = Depends(get_vacation_service),
):
    return _vacation_response(service.create_vacation(data, session))


@router.get("/{vacation_id}", response_model=VacationResponse)
async def get_vacation(
    vacation_id: str,
    session: SessionContext = Depends(get_session_context),
    service: VacationService = Depends(get_vacation_service),
):
    return _vacation_response(service.get_vacation(vacation_id))


@router.patch("/{vacation_id}", response_model=VacationResponse)
async def update_vacation(
    vacation_id: str,
    data: VacationUpdate,
    session: SessionContext = Depends(require(Capability.EDIT_VACATIONS)),
    service: VacationService = Depends(get_vacation_service),
):
    """Requires the version that was read; a concurrent change answers 409"""
    return _vacation_response(service.update_vacation(vacation_id, data, session))


@router.delete("/{vacation_id}")
async def delete_vacation(
    vacation_id: str,
    session: SessionContext = Depends(require(Capability.EDIT_VACATIONS)),
    service: VacationService = Depends(get_vacation_service),
):
    return service.delete_vacation(vacation_id, session)
