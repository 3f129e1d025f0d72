"""Team service - Field agents"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...models import Agent
from ...permissions import restricts_to_own_sector
from .repository import TeamRepository
from .schemas import AgentCreate, AgentUpdate

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = TeamRepository()

    def get_agents(self, session: SessionContext, active_only: bool = False) -> list[Agent]:
        """Agents visible to the caller: own sector only, unless dev or Administrativo"""
        sector = None
        if restricts_to_own_sector(session.role, session.sector):
            if not session.sector:
                return []
            sector = session.sector
        return self.repo.get_agents(self.db, sector=sector, active_only=active_only)

    def get_agent(self, agent_id: str) -> Agent:
        agent = self.repo.get_agent(self.db, agent_id)
        if not agent:
            raise HTTPException(status_code=404, detail="Agente não encontrado")
        return agent

    def _values(self, data, **dump_options) -> dict:
        values = data.model_dump(**dump_options)
        if values.get("sector") is not None:
            values["sector"] = values["sector"].value
        return values

    def create_agent(self, data: AgentCreate, session: SessionContext) -> Agent:
        try:
            agent = self.repo.create_agent(self.db, **self._values(data))
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=409, detail="Este usuário já está vinculado a outro agente"
            ) from e
        logger.info(f"✅ Agent created by {session.email}: {agent.name}")
        return agent

    def update_agent(self, agent_id: str, data: AgentUpdate, session: SessionContext) -> Agent:
        agent = self.get_agent(agent_id)
        try:
            agent = self.repo.update_agent(self.db, agent, **self._values(data, exclude_unset=True))
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=409, detail="Este usuário já está vinculado a outro agente"
            ) from e
        logger.info(f"✅ Agent updated by {session.email}: {agent.name}")
        return agent

    def delete_agent(self, agent_id: str, session: SessionContext) -> dict:
        agent = self.get_agent(agent_id)
        if self.repo.has_leave_records(self.db, agent.id):
            logger.warning(
                f"⚠️ Refusing to delete agent {agent.name}: has vacations, time off or time bank history"
            )
            raise HTTPException(
                status_code=409,
                detail=(
                    "Agente possui férias, folgas ou banco de horas registrados. "
                    "Desative-o em vez de excluir."
                ),
            )
        detached = self.repo.delete_agent(self.db, agent)
        logger.info(f"🗑️ Agent {agent.name} deleted by {session.email} ({detached} appointments detached)")
        return {"message": "Agente removido"}
