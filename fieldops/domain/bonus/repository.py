"""Bonus repository - Database operations for the bonus report and schedule"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Agent, Appointment, AppointmentAgent, BonusSettings, CityBonusLevel


class BonusRepository:
    """Repository for bonus database operations"""

    @staticmethod
    def get_bonus_agents(db: Session) -> list[Agent]:
        """Active agents that take part in the bonus program, by name"""
        return (
            db.query(Agent)
            .filter(Agent.is_active.is_(True), Agent.receives_bonus.is_(True))
            .order_by(Agent.name)
            .all()
        )

    @staticmethod
    def get_settings(db: Session) -> Optional[BonusSettings]:
        return db.query(BonusSettings).order_by(BonusSettings.id).first()

    @staticmethod
    def save_settings(db: Session, **values) -> BonusSettings:
        settings = db.query(BonusSettings).order_by(BonusSettings.id).first()
        if not settings:
            settings = BonusSettings()
            db.add(settings)
        for key, value in values.items():
            setattr(settings, key, value)
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def get_city_levels(db: Session) -> list[CityBonusLevel]:
        return db.query(CityBonusLevel).order_by(CityBonusLevel.city_name).all()

    @staticmethod
    def get_city_level(db: Session, city_id: str) -> Optional[CityBonusLevel]:
        return db.query(CityBonusLevel).filter(CityBonusLevel.id == city_id).first()

    @staticmethod
    def create_city_level(db: Session, **data) -> CityBonusLevel:
        city = CityBonusLevel(**data)
        db.add(city)
        db.commit()
        db.refresh(city)
        return city

    @staticmethod
    def update_city_level(db: Session, city: CityBonusLevel, **updates) -> CityBonusLevel:
        for key, value in updates.items():
            if value is not None and hasattr(city, key):
                setattr(city, key, value)
        db.commit()
        db.refresh(city)
        return city

    @staticmethod
    def delete_city_level(db: Session, city: CityBonusLevel) -> None:
        db.delete(city)
        db.commit()

    @staticmethod
    def get_assigned_appointment_ids(db: Session, agent_id: str) -> list[str]:
        rows = (
            db.query(AppointmentAgent.appointment_id)
            .filter(AppointmentAgent.agent_id == agent_id)
            .all()
        )
        return [row.appointment_id for row in rows]

    @staticmethod
    def get_appointments_in_range(
        db: Session, appointment_ids: list[str], start: date, end: date
    ) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(
                Appointment.id.in_(appointment_ids),
                Appointment.date >= start,
                Appointment.date <= end,
            )
            .all()
        )
