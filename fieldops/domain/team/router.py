"""Team router - FastAPI endpoints for agents"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context
from ...database import get_db
from ...permissions import Capability, require
from .schemas import AgentCreate, AgentResponse, AgentUpdate
from .service import TeamService

router = APIRouter(prefix="/team", tags=["Team"])


def get_team_service(db: Session = Depends(get_db)) -> TeamService:
    """Dependency injection for TeamService"""
    return TeamService(db)


@router.get("", response_model=list[AgentResponse])
async def list_agents(
    active_only: bool = Query(False, alias="activeOnly"),
    session: SessionContext = Depends(get_session_context),
    service: TeamService = Depends(get_team_service),
):
    return service.get_agents(session, active_only=active_only)


@router.post("", response_model=AgentResponse, status_code=201)
async def create_agent(
    data: AgentCreate,
    session: SessionContext = Depends(require(Capability.EDIT_TEAM)),
    service: TeamService = Depends(get_team_service),
):
    return service.create_agent(data, session)


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(
    agent_id: str,
    session: SessionContext = Depends(get_session_context),
    service: TeamService = Depends(get_team_service),
):
    return service.get_agent(agent_id)


@router.patch("/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: str,
    data: AgentUpdate,
    session: SessionContext = Depends(require(Capability.EDIT_TEAM)),
    service: TeamService = Depends(get_team_service),
):
    return service.update_agent(agent_id, data, session)


@router.delete("/{agent_id}")
async def delete_agent(
    agent_id: str,
    session: SessionContext = Depends(require(Capability.EDIT_TEAM)),
    service: TeamService = Depends(get_team_service),
):
    return service.delete_agent(agent_id, session)
