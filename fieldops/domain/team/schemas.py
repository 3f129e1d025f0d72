"""Team domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...permissions import Sector
from ...shared.validators import validate_hex_color


class AgentCreate(BaseModel):
    name: str
    sector: Optional[Sector] = None
    is_active: bool = True
    color: str = "#3b82f6"
    receives_bonus: bool = True
    user_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Nome é obrigatório")
        return v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return validate_hex_color(v)


class AgentUpdate(BaseModel):
    name: Optional[str] = None
    sector: Optional[Sector] = None
    is_active: Optional[bool] = None
    color: Optional[str] = None
    receives_bonus: Optional[bool] = None
    user_id: Optional[str] = None

    @field_validator("name", "is_active", "color", "receives_bonus")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Campo não pode ser nulo")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Nome é obrigatório")
        return v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return validate_hex_color(v)


class AgentResponse(BaseModel):
    id: str
    name: str
    sector: Optional[str] = None
    is_active: bool
    color: Optional[str] = None
    receives_bonus: bool
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
