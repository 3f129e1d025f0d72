"""Users router - Session info and privileged user management endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context
from ...database import get_db
from ...permissions import Page, can_edit_page, capabilities
from .admin_client import AuthAdminClient
from .repository import UserRepository
from .schemas import (
    CreateUserRequest,
    ResetPasswordRequest,
    ResolveUsernameRequest,
    SessionResponse,
    UpdateUserRequest,
    UserResponse,
)
from .service import UserService

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Auth"])
router = APIRouter(prefix="/users", tags=["Users"])


def get_admin_client() -> AuthAdminClient:
    return AuthAdminClient()


def get_user_service(
    db: Session = Depends(get_db), admin_client: AuthAdminClient = Depends(get_admin_client)
) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db, admin_client)


# ============================================================================
# SESSION
# ============================================================================


@auth_router.get("/me", response_model=SessionResponse)
async def get_me(session: SessionContext = Depends(get_session_context)):
    """The caller's identity, role, sector and what they may do"""
    return SessionResponse(
        userId=session.user_id,
        email=session.email,
        username=session.username,
        fullName=session.full_name,
        role=session.role,
        sector=session.sector,
        capabilities=capabilities(session.role, session.sector),
        editablePages={page.value: can_edit_page(session.role, session.sector, page) for page in Page},
    )


@auth_router.post("/resolve-username")
async def resolve_username(data: ResolveUsernameRequest, db: Session = Depends(get_db)):
    """Sign-in by username: the client exchanges it for the e-mail the provider knows"""
    email = UserRepository.get_email_from_username(db, data.username.strip().lower())
    if not email:
        logger.warning(f"⚠️ Unknown username on sign-in: {data.username}")
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return {"email": email}


# ============================================================================
# USER MANAGEMENT
# ============================================================================


@router.get("", response_model=list[UserResponse])
async def list_users(
    session: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service),
):
    return service.list_users(session)


@router.post("")
async def create_user(
    data: CreateUserRequest,
    session: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service),
):
    return await service.create_user(data, session)


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    data: UpdateUserRequest,
    session: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service),
):
    return await service.update_user(user_id, data, session)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    session: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service),
):
    return await service.delete_user(user_id, session)


@router.post("/{user_id}/reset-password")
async def reset_password(
    user_id: str,
    data: ResetPasswordRequest,
    session: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service),
):
    return await service.reset_password(user_id, data.newPassword, session)
