"""Appointment service - Business logic for calendar visits"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...models import Appointment, Vehicle
from ..calendar.business_days import month_bounds
from ..vacations.repository import TimeOffRepository, VacationRepository
from .repository import AppointmentRepository
from .schemas import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    AssignedAgent,
    AssignedVehicle,
)

logger = logging.getLogger(__name__)

VERSION_CONFLICT_DETAIL = "Este agendamento foi alterado por outro usuário. Recarregue e tente novamente."


def to_response(appointment: Appointment) -> AppointmentResponse:
    vehicle = appointment.vehicle
    return AppointmentResponse(
        id=appointment.id,
        title=appointment.title,
        description=appointment.description,
        city=appointment.city,
        date=appointment.date,
        time=appointment.time,
        status=appointment.status,
        expense_status=appointment.expense_status,
        is_penalized=appointment.is_penalized,
        appointment_type=appointment.appointment_type,
        vehicle=(
            AssignedVehicle(id=vehicle.id, model=vehicle.model, plate=vehicle.plate)
            if vehicle
            else None
        ),
        agents=[AssignedAgent(id=a.id, name=a.name, color=a.color) for a in appointment.agents],
        version=appointment.version,
        created_by_name=appointment.created_by_name,
        updated_by_name=appointment.updated_by_name,
        last_action=appointment.last_action,
        last_action_at=appointment.last_action_at,
    )


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.vacations = VacationRepository()
        self.time_off = TimeOffRepository()

    def get_month(self, year: int, month: int, agent_id: Optional[str] = None) -> list[Appointment]:
        start, end = month_bounds(year, month)
        return self.repo.get_appointments_between(self.db, start, end, agent_id)

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Agendamento não encontrado")
        return appointment

    def ensure_agents_available(self, agent_ids: list[str], day: date) -> None:
        """Reject agents that are on vacation or on approved time off on the day"""
        agents = {agent.id: agent for agent in self.repo.get_agents(self.db, agent_ids)}
        missing = [agent_id for agent_id in agent_ids if agent_id not in agents]
        if missing:
            raise HTTPException(status_code=400, detail="Agente não encontrado")

        for agent_id in agent_ids:
            agent = agents[agent_id]
            if self.vacations.is_agent_on_vacation(self.db, agent_id, day):
                logger.warning(f"⚠️ {agent.name} is on vacation on {day.isoformat()}")
                raise HTTPException(
                    status_code=400, detail=f"{agent.name} está de férias nesta data"
                )
            if self.time_off.has_approved_time_off(self.db, agent_id, day):
                logger.warning(f"⚠️ {agent.name} has approved time off on {day.isoformat()}")
                raise HTTPException(
                    status_code=400, detail=f"{agent.name} está de folga nesta data"
                )

    def _ensure_vehicle(self, vehicle_id: Optional[str]) -> None:
        if vehicle_id and not self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first():
            raise HTTPException(status_code=400, detail="Veículo não encontrado")

    def create_appointment(self, data: AppointmentCreate, session: SessionContext) -> Appointment:
        logger.info(f"📥 Creating appointment for {data.date.isoformat()} by {session.email}")
        agent_ids = list(dict.fromkeys(data.agent_ids))
        self.ensure_agents_available(agent_ids, data.date)
        self._ensure_vehicle(data.vehicle_id)

        values = data.model_dump(exclude={"agent_ids"})
        appointment = self.repo.create_appointment(
            self.db,
            agent_ids,
            **values,
            created_by=session.user_id,
            created_by_name=session.display_name,
            last_action="created",
            last_action_at=datetime.now(timezone.utc).replace(tzinfo=None),
        )
        logger.info(f"✅ Appointment created: {appointment.id}")
        return self.get_appointment(appointment.id)

    def _apply_update(
        self,
        appointment_id: str,
        expected_version: int,
        session: SessionContext,
        agent_ids: Optional[list[str]] = None,
        **values,
    ) -> Appointment:
        values.update(
            updated_by_name=session.display_name,
            last_action="updated",
            last_action_at=datetime.now(timezone.utc).replace(tzinfo=None),
        )
        if not self.repo.update_if_version(
            self.db, appointment_id, expected_version, agent_ids=agent_ids, **values
        ):
            logger.warning(
                f"⚠️ Stale appointment update rejected: {appointment_id} (expected v{expected_version})"
            )
            raise HTTPException(status_code=409, detail=VERSION_CONFLICT_DETAIL)
        return self.get_appointment(appointment_id)

    def update_appointment(
        self, appointment_id: str, data: AppointmentUpdate, session: SessionContext
    ) -> Appointment:
        appointment = self.get_appointment(appointment_id)

        values = data.model_dump(exclude={"expected_version", "agent_ids"}, exclude_unset=True)
        for required in ("title", "city"):
            if required in values and not (values[required] or "").strip():
                raise HTTPException(status_code=400, detail=f"Campo obrigatório: {required}")

        agent_ids = list(dict.fromkeys(data.agent_ids)) if data.agent_ids is not None else None
        day = data.date or appointment.date
        if agent_ids is not None or data.date is not None:
            self.ensure_agents_available(
                agent_ids if agent_ids is not None else [a.id for a in appointment.agents], day
            )
        if "vehicle_id" in values:
            self._ensure_vehicle(values["vehicle_id"])

        updated = self._apply_update(
            appointment_id, data.expected_version, session, agent_ids=agent_ids, **values
        )
        logger.info(f"✅ Appointment {appointment_id} updated by {session.email} (v{updated.version})")
        return updated

    def reschedule(
        self, appointment_id: str, data: AppointmentReschedule, session: SessionContext
    ) -> Appointment:
        """Move a visit to another day (calendar drag and drop)"""
        appointment = self.get_appointment(appointment_id)
        self.ensure_agents_available([a.id for a in appointment.agents], data.date)
        updated = self._apply_update(
            appointment_id, data.expected_version, session, date=data.date
        )
        logger.info(f"📅 Appointment {appointment_id} moved to {data.date.isoformat()} by {session.email}")
        return updated

    def change_status(
        self, appointment_id: str, data: AppointmentStatusUpdate, session: SessionContext
    ) -> Appointment:
        self.get_appointment(appointment_id)
        values = {"status": data.status}
        if data.is_penalized is not None:
            values["is_penalized"] = data.is_penalized
        updated = self._apply_update(appointment_id, data.expected_version, session, **values)
        logger.info(f"✅ Appointment {appointment_id} status → {data.status} by {session.email}")
        return updated

    def delete_appointment(self, appointment_id: str, session: SessionContext) -> dict:
        appointment = self.get_appointment(appointment_id)
        self.repo.delete_appointment(self.db, appointment)
        logger.info(f"🗑️ Appointment {appointment_id} deleted by {session.email}")
        return {"message": "Agendamento removido"}
