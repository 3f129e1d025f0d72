"""Users service - Privileged user management backed by the auth provider"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...models import Profile
from ...permissions import Role, can_access_user_management, can_edit_user_management
from ...shared.validators import validate_uuid
from .admin_client import AuthAdminClient, UserAdminError
from .repository import UserRepository
from .schemas import CreateUserRequest, UpdateUserRequest, UserResponse

logger = logging.getLogger(__name__)

ADMIN_REQUIRED = "Unauthorized: Admin access required"


def _enum_value(item) -> Optional[str]:
    return item.value if item is not None else None


class UserService:
    def __init__(self, db: Session, admin_client: AuthAdminClient):
        self.db = db
        self.repo = UserRepository()
        self.admin = admin_client

    def _require_admin(self, session: SessionContext) -> None:
        if not can_access_user_management(session.role, session.sector):
            logger.warning(f"⚠️ User management denied for {session.email} (role={session.role})")
            raise UserAdminError(ADMIN_REQUIRED, status_code=403)

    def _require_target(self, session: SessionContext, target_sector: Optional[str]) -> None:
        if not can_edit_user_management(session.role, session.sector, target_sector):
            logger.warning(
                f"⚠️ {session.email} ({session.sector}) cannot manage users of sector {target_sector}"
            )
            raise UserAdminError("Você só pode gerenciar usuários do seu setor", status_code=403)

    def _get_profile(self, user_id: str) -> Profile:
        if not validate_uuid(user_id):
            raise UserAdminError("ID de usuário inválido", status_code=400)
        profile = self.repo.get_profile(self.db, user_id)
        if not profile:
            raise UserAdminError("Usuário não encontrado", status_code=404)
        return profile

    def to_response(self, profile: Profile, session: SessionContext) -> UserResponse:
        return UserResponse(
            id=profile.id,
            username=profile.username,
            fullName=profile.full_name,
            email=profile.email,
            role=profile.role.role if profile.role else None,
            sector=profile.sector,
            canEdit=can_edit_user_management(session.role, session.sector, profile.sector),
            created_at=profile.created_at,
        )

    def list_users(self, session: SessionContext) -> list[UserResponse]:
        self._require_admin(session)
        return [self.to_response(p, session) for p in self.repo.get_profiles(self.db)]

    async def create_user(self, data: CreateUserRequest, session: SessionContext) -> dict:
        self._require_admin(session)
        sector = _enum_value(data.sector)
        self._require_target(session, sector)
        if data.role == Role.DEV and session.role != Role.DEV.value:
            raise UserAdminError(ADMIN_REQUIRED, status_code=403)

        logger.info(f"📥 Creating user {data.username} <{data.email}> role={data.role.value}")

        if self.repo.username_taken(self.db, data.username):
            raise UserAdminError("Nome de usuário já existe", status_code=409)
        if self.repo.email_taken(self.db, data.email):
            raise UserAdminError("Este e-mail já está em uso por outro usuário", status_code=409)

        identity = await self.admin.create_user(data.email, data.password, data.fullName)
        user_id = identity.get("id")
        if not user_id:
            raise UserAdminError("User creation failed", status_code=500)

        try:
            profile = self.repo.create_profile(
                self.db,
                user_id,
                role=data.role.value,
                username=data.username,
                full_name=data.fullName,
                email=data.email,
                sector=sector,
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"❌ Profile insert failed for {data.email}, removing identity: {str(e)}")
            await self.admin.delete_user(user_id)
            raise UserAdminError("Nome de usuário já existe", status_code=409) from e

        logger.info(f"✅ User created: {profile.username} ({profile.id}) by {session.email}")
        return {
            "success": True,
            "user": {
                "id": profile.id,
                "email": profile.email,
                "username": profile.username,
                "role": data.role.value,
            },
        }

    async def update_user(self, user_id: str, data: UpdateUserRequest, session: SessionContext) -> dict:
        self._require_admin(session)
        profile = self._get_profile(user_id)
        self._require_target(session, profile.sector)
        new_sector = _enum_value(data.sector)
        if new_sector is not None:
            self._require_target(session, new_sector)
        if data.role == Role.DEV and session.role != Role.DEV.value:
            raise UserAdminError(ADMIN_REQUIRED, status_code=403)

        if data.username and self.repo.username_taken(self.db, data.username, exclude_id=user_id):
            raise UserAdminError("Nome de usuário já existe", status_code=409)

        identity_changes = {}
        if data.email and data.email != profile.email:
            if self.repo.email_taken(self.db, data.email, exclude_id=user_id):
                raise UserAdminError("Este e-mail já está em uso por outro usuário", status_code=409)
            identity_changes["email"] = data.email
        if data.password:
            identity_changes["password"] = data.password

        if identity_changes:
            await self.admin.update_user(user_id, **identity_changes)

        try:
            self.repo.update_profile(
                self.db,
                profile,
                role=_enum_value(data.role),
                username=data.username,
                full_name=data.fullName,
                email=identity_changes.get("email"),
                sector=new_sector,
            )
        except IntegrityError as e:
            self.db.rollback()
            raise UserAdminError("Nome de usuário já existe", status_code=409) from e

        logger.info(
            f"✅ User {user_id} updated by {session.email} "
            f"(fields: {sorted(data.model_dump(exclude_none=True, exclude={'password'}))}, "
            f"password: {'yes' if data.password else 'no'})"
        )
        return {"success": True, "message": "Usuário atualizado com sucesso"}

    async def delete_user(self, user_id: str, session: SessionContext) -> dict:
        self._require_admin(session)
        if user_id == session.user_id:
            raise UserAdminError("Você não pode excluir seu próprio usuário", status_code=400)

        profile = self._get_profile(user_id)
        self._require_target(session, profile.sector)

        await self.admin.delete_user(user_id)
        self.repo.delete_profile(self.db, profile)
        logger.info(f"🗑️ User {user_id} deleted by {session.email}")
        return {"success": True, "message": "Usuário excluído com sucesso"}

    async def reset_password(self, user_id: str, new_password: str, session: SessionContext) -> dict:
        self._require_admin(session)
        if not user_id or not new_password:
            raise UserAdminError("userId e newPassword são obrigatórios", status_code=400)

        profile = self._get_profile(user_id)
        self._require_target(session, profile.sector)

        await self.admin.update_user(user_id, password=new_password)
        logger.info(f"🔑 Password reset for user {user_id} by {session.email}")
        return {"success": True, "message": "Senha alterada com sucesso"}
