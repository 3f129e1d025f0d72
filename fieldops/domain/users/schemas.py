"""Users domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...permissions import Role, Sector
from ...shared.validators import validate_email, validate_username


class CreateUserRequest(BaseModel):
    username: str
    email: str
    password: str = Field(min_length=6)
    fullName: str
    role: Role = Role.USER
    sector: Optional[Sector] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        return validate_username(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)


class UpdateUserRequest(BaseModel):
    username: Optional[str] = None
    fullName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[Role] = None
    sector: Optional[Sector] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        return validate_username(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)


class ResetPasswordRequest(BaseModel):
    newPassword: str = Field(min_length=6)


class UserResponse(BaseModel):
    id: str
    username: Optional[str] = None
    fullName: Optional[str] = None
    email: str
    role: Optional[str] = None
    sector: Optional[str] = None
    canEdit: bool = False
    created_at: Optional[datetime] = None


class ResolveUsernameRequest(BaseModel):
    username: str


class SessionResponse(BaseModel):
    userId: str
    email: Optional[str] = None
    username: Optional[str] = None
    fullName: Optional[str] = None
    role: Optional[str] = None
    sector: Optional[str] = None
    capabilities: dict[str, bool]
    editablePages: dict[str, bool]
