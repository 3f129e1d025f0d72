"""Appointment repository - Database operations for appointments"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Agent, Appointment, AppointmentAgent


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def _with_relations(db: Session):
        return db.query(Appointment).options(
            joinedload(Appointment.vehicle),
            joinedload(Appointment.assignments).joinedload(AppointmentAgent.agent),
        )

    @staticmethod
    def get_appointments_between(
        db: Session, start: date, end: date, agent_id: Optional[str] = None
    ) -> list[Appointment]:
        query = AppointmentRepository._with_relations(db).filter(
            Appointment.date >= start, Appointment.date <= end
        )
        if agent_id:
            query = query.filter(
                Appointment.assignments.any(AppointmentAgent.agent_id == agent_id)
            )
        return query.order_by(Appointment.date, Appointment.time).all()

    @staticmethod
    def get_appointment(db: Session, appointment_id: str) -> Optional[Appointment]:
        return (
            AppointmentRepository._with_relations(db)
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def get_agents(db: Session, agent_ids: list[str]) -> list[Agent]:
        if not agent_ids:
            return []
        return db.query(Agent).filter(Agent.id.in_(agent_ids)).all()

    @staticmethod
    def create_appointment(db: Session, agent_ids: list[str], **data) -> Appointment:
        appointment = Appointment(**data)
        appointment.assignments = [AppointmentAgent(agent_id=agent_id) for agent_id in agent_ids]
        db.add(appointment)
        db.commit()
        return appointment

    @staticmethod
    def update_if_version(
        db: Session,
        appointment_id: str,
        expected_version: int,
        agent_ids: Optional[list[str]] = None,
        **values,
    ) -> bool:
        """
        Compare-and-set update.

        Writes only when the stored version still equals expected_version and
        bumps it; returns False (nothing written) otherwise.
        """
        values["version"] = Appointment.version + 1
        updated = (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.version == expected_version)
            .update(values, synchronize_session=False)
        )
        if updated != 1:
            db.rollback()
            return False

        if agent_ids is not None:
            # Old rows are flushed out first: kept agents would hit uq_appointment_agent
            appointment = db.get(Appointment, appointment_id)
            appointment.assignments.clear()
            db.flush()
            appointment.assignments.extend(
                AppointmentAgent(agent_id=agent_id) for agent_id in agent_ids
            )

        db.commit()
        db.expire_all()
        return True

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()
