"""Vacations repository - Database operations for vacations, time off and time bank"""

from datetime import date
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from ...models import Agent, TimeBank, TimeBankTransaction, TimeOff, Vacation


class VacationRepository:
    """Repository for vacation database operations"""

    @staticmethod
    def get_vacations(
        db: Session, sector: Optional[str] = None, agent_id: Optional[str] = None
    ) -> list[Vacation]:
        query = db.query(Vacation).join(Agent).options(joinedload(Vacation.agent))
        if sector is not None:
            query = query.filter(Agent.sector == sector)
        if agent_id:
            query = query.filter(Vacation.agent_id == agent_id)
        return query.order_by(Vacation.start_date.desc()).all()

    @staticmethod
    def get_vacation(db: Session, vacation_id: str) -> Optional[Vacation]:
        return db.query(Vacation).filter(Vacation.id == vacation_id).first()

    @staticmethod
    def create_vacation(db: Session, **data) -> Vacation:
        vacation = Vacation(**data)
        db.add(vacation)
        db.commit()
        db.refresh(vacation)
        return vacation

    @staticmethod
    def update_vacation_if_version(
        db: Session, vacation_id: str, expected_version: int, **values
    ) -> bool:
        """Compare-and-set update; False when the row changed since it was read"""
        values["version"] = Vacation.version + 1
        updated = (
            db.query(Vacation)
            .filter(Vacation.id == vacation_id, Vacation.version == expected_version)
            .update(values, synchronize_session=False)
        )
        db.commit()
        return updated == 1

    @staticmethod
    def delete_vacation(db: Session, vacation: Vacation) -> None:
        db.delete(vacation)
        db.commit()

    @staticmethod
    def is_agent_on_vacation(db: Session, agent_id: str, day: date) -> bool:
        """The end date is the return date, so it does not count as a vacation day"""
        return (
            db.query(Vacation.id)
            .filter(
                Vacation.agent_id == agent_id,
                Vacation.start_date <= day,
                Vacation.end_date > day,
            )
            .first()
            is not None
        )

    @staticmethod
    def get_vacations_starting_on(db: Session, days: list[date]) -> list[Vacation]:
        return (
            db.query(Vacation)
            .options(joinedload(Vacation.agent))
            .filter(Vacation.start_date.in_(days))
            .order_by(Vacation.start_date)
            .all()
        )


class TimeOffRepository:
    """Repository for time-off database operations"""

    @staticmethod
    def get_time_off(
        db: Session,
        sector: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[TimeOff]:
        query = db.query(TimeOff).outerjoin(Agent, TimeOff.agent_id == Agent.id)
        if sector is not None:
            # Company-wide days off are visible to every sector
            query = query.filter(or_(TimeOff.agent_id.is_(None), Agent.sector == sector))
        if start is not None:
            query = query.filter(TimeOff.date >= start)
        if end is not None:
            query = query.filter(TimeOff.date <= end)
        return query.order_by(TimeOff.date.desc()).all()

    @staticmethod
    def get_time_off_by_id(db: Session, time_off_id: str) -> Optional[TimeOff]:
        return db.query(TimeOff).filter(TimeOff.id == time_off_id).first()

    @staticmethod
    def create_time_off(db: Session, **data) -> TimeOff:
        time_off = TimeOff(**data)
        db.add(time_off)
        db.flush()
        return time_off

    @staticmethod
    def update_time_off(db: Session, time_off: TimeOff, **values) -> TimeOff:
        for key, value in values.items():
            setattr(time_off, key, value)
        db.commit()
        db.refresh(time_off)
        return time_off

    @staticmethod
    def delete_time_off(db: Session, time_off: TimeOff) -> None:
        db.query(TimeBankTransaction).filter(
            TimeBankTransaction.related_time_off_id == time_off.id
        ).update({TimeBankTransaction.related_time_off_id: None}, synchronize_session=False)
        db.delete(time_off)
        db.commit()

    @staticmethod
    def has_approved_time_off(db: Session, agent_id: str, day: date) -> bool:
        return (
            db.query(TimeOff.id)
            .filter(
                TimeOff.agent_id == agent_id,
                TimeOff.approved.is_(True),
                TimeOff.date <= day,
                or_(
                    and_(TimeOff.end_date.is_(None), TimeOff.date == day),
                    TimeOff.end_date >= day,
                ),
            )
            .first()
            is not None
        )


class TimeBankRepository:
    """Repository for time bank balances and their transaction log"""

    @staticmethod
    def get_balances(db: Session, sector: Optional[str] = None) -> list[tuple[Agent, Optional[TimeBank]]]:
        query = db.query(Agent, TimeBank).outerjoin(TimeBank, TimeBank.agent_id == Agent.id)
        if sector is not None:
            query = query.filter(Agent.sector == sector)
        return query.order_by(Agent.name).all()

    @staticmethod
    def upsert_time_bank(
        db: Session,
        agent_id: str,
        hours_change,
        bonus_change: int,
        transaction_type: str,
        description: Optional[str] = None,
        related_time_off_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> TimeBank:
        """Apply a change to an agent's balance and log it. Does not commit"""
        balance = db.query(TimeBank).filter(TimeBank.agent_id == agent_id).first()
        if not balance:
            balance = TimeBank(agent_id=agent_id, accumulated_hours=0, bonuses=0)
            db.add(balance)
            db.flush()

        balance.accumulated_hours = (balance.accumulated_hours or 0) + hours_change
        balance.bonuses = (balance.bonuses or 0) + bonus_change

        db.add(
            TimeBankTransaction(
                agent_id=agent_id,
                hours_change=hours_change,
                bonus_change=bonus_change,
                transaction_type=transaction_type,
                description=description,
                related_time_off_id=related_time_off_id,
                created_by=created_by,
            )
        )
        db.flush()
        return balance

    @staticmethod
    def get_transactions(db: Session, agent_id: str) -> list[TimeBankTransaction]:
        return (
            db.query(TimeBankTransaction)
            .filter(TimeBankTransaction.agent_id == agent_id)
            .order_by(TimeBankTransaction.created_at.desc(), TimeBankTransaction.id.desc())
            .all()
        )
