"""Team repository - Database operations for agents"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Agent, AppointmentAgent, TimeBank, TimeBankTransaction, TimeOff, Vacation


class TeamRepository:
    @staticmethod
    def get_agents(
        db: Session, sector: Optional[str] = None, active_only: bool = False
    ) -> list[Agent]:
        query = db.query(Agent)
        if sector is not None:
            query = query.filter(Agent.sector == sector)
        if active_only:
            query = query.filter(Agent.is_active.is_(True))
        return query.order_by(Agent.name).all()

    @staticmethod
    def get_agent(db: Session, agent_id: str) -> Optional[Agent]:
        return db.query(Agent).filter(Agent.id == agent_id).first()

    @staticmethod
    def create_agent(db: Session, **data) -> Agent:
        agent = Agent(**data)
        db.add(agent)
        db.commit()
        db.refresh(agent)
        return agent

    @staticmethod
    def update_agent(db: Session, agent: Agent, **updates) -> Agent:
        for key, value in updates.items():
            if hasattr(agent, key):
                setattr(agent, key, value)
        db.commit()
        db.refresh(agent)
        return agent

    @staticmethod
    def has_leave_records(db: Session, agent_id: str) -> bool:
        """Vacations, time off or any time bank balance or transaction"""
        for model in (Vacation, TimeOff, TimeBank, TimeBankTransaction):
            if db.query(model.agent_id).filter(model.agent_id == agent_id).first() is not None:
                return True
        return False

    @staticmethod
    def delete_agent(db: Session, agent: Agent) -> int:
        """Delete an agent, removing it from every appointment first. Returns detached count"""
        detached = (
            db.query(AppointmentAgent)
            .filter(AppointmentAgent.agent_id == agent.id)
            .delete(synchronize_session=False)
        )
        db.delete(agent)
        db.commit()
        return detached
