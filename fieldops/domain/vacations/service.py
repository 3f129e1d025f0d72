"""Vacations service - Vacation scheduling, time off and time bank"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...config import TIME_BANK_HOURS_PER_DAY, VACATION_REMINDER_DAYS
from ...models import Agent, TimeOff, Vacation
from ...permissions import restricts_to_own_sector
from ..calendar.business_days import (
    VacationRuleViolation,
    calculate_return_date,
    concession_deadline,
    count_working_days,
    validate_vacation_start,
)
from ..calendar.repository import load_calendar
from .repository import TimeBankRepository, TimeOffRepository, VacationRepository
from .schemas import (
    TimeBankAdjustment,
    TimeOffCreate,
    TimeOffUpdate,
    VacationCreate,
    VacationReminderResponse,
    VacationUpdate,
)

logger = logging.getLogger(__name__)


def _visible_sector(session: SessionContext) -> Optional[str]:
    """Sector filter for list views, or None for unrestricted callers"""
    if restricts_to_own_sector(session.role, session.sector):
        return session.sector or ""
    return None


def _plural_days(count: int) -> str:
    return f"{count} dia{'s' if count > 1 else ''}"


class VacationService:
    """Service layer for vacation business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = VacationRepository()

    def get_vacations(self, session: SessionContext, agent_id: Optional[str] = None) -> list[Vacation]:
        return self.repo.get_vacations(self.db, sector=_visible_sector(session), agent_id=agent_id)

    def get_vacation(self, vacation_id: str) -> Vacation:
        vacation = self.repo.get_vacation(self.db, vacation_id)
        if not vacation:
            raise HTTPException(status_code=404, detail="Férias não encontradas")
        return vacation

    def _require_agent(self, agent_id: str) -> Agent:
        agent = self.db.query(Agent).filter(Agent.id == agent_id).first()
        if not agent:
            raise HTTPException(status_code=400, detail="Agente não encontrado")
        return agent

    def _check_start(self, start: date, expiry: date, deadline: date) -> None:
        try:
            validate_vacation_start(start, expiry, deadline, load_calendar(self.db))
        except VacationRuleViolation as e:
            logger.warning(f"⚠️ Vacation start {start.isoformat()} rejected: {e.code}")
            raise HTTPException(
                status_code=400, detail={"code": e.code, "message": e.message}
            ) from e

    def create_vacation(self, data: VacationCreate, session: SessionContext) -> Vacation:
        agent = self._require_agent(data.agent_id)
        deadline = data.deadline or concession_deadline(data.expiry_date)
        self._check_start(data.start_date, data.expiry_date, deadline)

        vacation = self.repo.create_vacation(
            self.db,
            agent_id=agent.id,
            start_date=data.start_date,
            end_date=date.fromisoformat(calculate_return_date(data.start_date.isoformat(), data.days)),
            days=data.days,
            period_number=data.period_number,
            expiry_date=data.expiry_date,
            deadline=deadline,
            notes=data.notes,
        )
        logger.info(
            f"✅ Vacation created by {session.email}: {agent.name} "
            f"{vacation.start_date.isoformat()} → {vacation.end_date.isoformat()}"
        )
        return vacation

    def update_vacation(self, vacation_id: str, data: VacationUpdate, session: SessionContext) -> Vacation:
        vacation = self.get_vacation(vacation_id)

        agent_id = data.agent_id or vacation.agent_id
        if data.agent_id:
            self._require_agent(data.agent_id)
        start = data.start_date or vacation.start_date
        days = data.days or vacation.days
        expiry = data.expiry_date or vacation.expiry_date
        if data.deadline:
            deadline = data.deadline
        elif data.expiry_date:
            deadline = concession_deadline(data.expiry_date)
        else:
            deadline = vacation.deadline

        self._check_start(start, expiry, deadline)

        values = {
            "agent_id": agent_id,
            "start_date": start,
            "end_date": date.fromisoformat(calculate_return_date(start.isoformat(), days)),
            "days": days,
            "period_number": (
                data.period_number if data.period_number is not None else vacation.period_number
            ),
            "expiry_date": expiry,
            "deadline": deadline,
            "notes": data.notes if data.notes is not None else vacation.notes,
        }

        if not self.repo.update_vacation_if_version(
            self.db, vacation_id, data.expected_version, **values
        ):
            logger.warning(
                f"⚠️ Stale vacation update rejected: {vacation_id} (expected v{data.expected_version})"
            )
            raise HTTPException(
                status_code=409,
                detail="Estas férias foram alteradas por outro usuário. Recarregue e tente novamente.",
            )

        self.db.expire_all()
        vacation = self.get_vacation(vacation_id)
        logger.info(f"✅ Vacation {vacation_id} updated by {session.email} (v{vacation.version})")
        return vacation

    def delete_vacation(self, vacation_id: str, session: SessionContext) -> dict:
        vacation = self.get_vacation(vacation_id)
        self.repo.delete_vacation(self.db, vacation)
        logger.info(f"🗑️ Vacation {vacation_id} deleted by {session.email}")
        return {"message": "Férias removidas"}

    def is_agent_on_vacation(self, agent_id: str, day: date) -> bool:
        return self.repo.is_agent_on_vacation(self.db, agent_id, day)

    def get_upcoming_vacation_reminders(
        self, session: SessionContext, today: Optional[date] = None
    ) -> list[VacationReminderResponse]:
        """Vacations starting exactly N days from today, for each configured N"""
        today = today or date.today()
        targets = {today + timedelta(days=n): n for n in VACATION_REMINDER_DAYS}
        sector = _visible_sector(session)

        reminders = []
        for vacation in self.repo.get_vacations_starting_on(self.db, list(targets)):
            if sector is not None and vacation.agent.sector != sector:
                continue
            days_until = targets[vacation.start_date]
            reminders.append(
                VacationReminderResponse(
                    agent_id=vacation.agent_id,
                    agent_name=vacation.agent.name,
                    start_date=vacation.start_date,
                    days_until_start=days_until,
                    reminder_type=f"{days_until}_days",
                )
            )
        return reminders


class TimeOffService:
    """Service layer for days off, including time bank deductions"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TimeOffRepository()
        self.bank = TimeBankRepository()

    def get_time_off(
        self, session: SessionContext, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[TimeOff]:
        return self.repo.get_time_off(self.db, sector=_visible_sector(session), start=start, end=end)

    def get_time_off_by_id(self, time_off_id: str) -> TimeOff:
        time_off = self.repo.get_time_off_by_id(self.db, time_off_id)
        if not time_off:
            raise HTTPException(status_code=404, detail="Folga não encontrada")
        return time_off

    def working_days(self, time_off: TimeOff) -> int:
        return count_working_days(time_off.date, time_off.end_date, load_calendar(self.db))

    def create_time_off(self, data: TimeOffCreate, session: SessionContext) -> TimeOff:
        """
        Register a day off. When it belongs to an agent, the agent's balance is
        debited per working day: one bonus day each for justified absences,
        otherwise TIME_BANK_HOURS_PER_DAY hours each.
        """
        if data.agent_id and not self.db.query(Agent).filter(Agent.id == data.agent_id).first():
            raise HTTPException(status_code=400, detail="Agente não encontrado")

        calendar = load_calendar(self.db)
        working_days = count_working_days(data.date, data.end_date, calendar)

        time_off = self.repo.create_time_off(self.db, **data.model_dump())

        if data.agent_id:
            if data.bonus_reason:
                self.bank.upsert_time_bank(
                    self.db,
                    agent_id=data.agent_id,
                    hours_change=Decimal("0"),
                    bonus_change=-working_days,
                    transaction_type="debit_bonus",
                    description=f"Folga abonada: {data.bonus_reason} ({_plural_days(working_days)})",
                    related_time_off_id=time_off.id,
                    created_by=session.user_id,
                )
            else:
                hours = working_days * TIME_BANK_HOURS_PER_DAY
                self.bank.upsert_time_bank(
                    self.db,
                    agent_id=data.agent_id,
                    hours_change=-Decimal(hours),
                    bonus_change=0,
                    transaction_type="debit_hours",
                    description=f"Folga - desconto de {hours} horas ({_plural_days(working_days)})",
                    related_time_off_id=time_off.id,
                    created_by=session.user_id,
                )

        self.db.commit()
        self.db.refresh(time_off)
        logger.info(
            f"✅ Time off created by {session.email}: {time_off.date.isoformat()} "
            f"({_plural_days(working_days)}) agent={time_off.agent_id or 'all'}"
        )
        return time_off

    def update_time_off(self, time_off_id: str, data: TimeOffUpdate, session: SessionContext) -> TimeOff:
        # Balances are only debited on creation; edits do not re-run deductions
        time_off = self.get_time_off_by_id(time_off_id)
        time_off = self.repo.update_time_off(self.db, time_off, **data.model_dump())
        logger.info(f"✅ Time off {time_off_id} updated by {session.email}")
        return time_off

    def delete_time_off(self, time_off_id: str, session: SessionContext) -> dict:
        time_off = self.get_time_off_by_id(time_off_id)
        self.repo.delete_time_off(self.db, time_off)
        logger.info(f"🗑️ Time off {time_off_id} deleted by {session.email}")
        return {"message": "Folga removida"}

    def has_approved_time_off(self, agent_id: str, day: date) -> bool:
        return self.repo.has_approved_time_off(self.db, agent_id, day)


class TimeBankService:
    """Per-agent hour and bonus-day balances"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TimeBankRepository()

    def get_balances(self, session: SessionContext) -> list[dict]:
        rows = self.repo.get_balances(self.db, sector=_visible_sector(session))
        return [
            {
                "agent_id": agent.id,
                "agent_name": agent.name,
                "accumulated_hours": balance.accumulated_hours if balance else Decimal("0"),
                "bonuses": balance.bonuses if balance else 0,
            }
            for agent, balance in rows
        ]

    def get_transactions(self, agent_id: str):
        return self.repo.get_transactions(self.db, agent_id)

    def adjust(self, agent_id: str, data: TimeBankAdjustment, session: SessionContext) -> dict:
        agent = self.db.query(Agent).filter(Agent.id == agent_id).first()
        if not agent:
            raise HTTPException(status_code=404, detail="Agente não encontrado")

        negative = data.hours < 0 or data.bonuses < 0
        description = data.description
        if not description:
            parts = []
            if data.hours:
                parts.append(f"{'+' if data.hours > 0 else ''}{data.hours}h")
            if data.bonuses:
                parts.append(f"{'+' if data.bonuses > 0 else ''}{data.bonuses} abono(s)")
            description = f"{'Ajuste' if negative else 'Crédito'} manual: {', '.join(parts)}"

        balance = self.repo.upsert_time_bank(
            self.db,
            agent_id=agent.id,
            hours_change=data.hours,
            bonus_change=data.bonuses,
            transaction_type="adjustment" if negative else "credit",
            description=description,
            created_by=session.user_id,
        )
        self.db.commit()
        self.db.refresh(balance)
        logger.info(f"✅ Time bank of {agent.name} adjusted by {session.email}: {description}")
        return {
            "agent_id": agent.id,
            "agent_name": agent.name,
            "accumulated_hours": balance.accumulated_hours,
            "bonuses": balance.bonuses,
        }
