"""Bonus domain schemas - Pydantic models for validation"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import normalize_city


class BonusSettingsUpdate(BaseModel):
    base_value: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    level_1_value: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    level_2_value: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    level_3_value: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class BonusSettingsResponse(BaseModel):
    base_value: Decimal
    level_1_value: Decimal
    level_2_value: Decimal
    level_3_value: Decimal

    class Config:
        from_attributes = True


class CityLevelCreate(BaseModel):
    city_name: str
    level: int = Field(ge=1, le=3)
    km: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("city_name")
    @classmethod
    def validate_city_name(cls, v):
        return normalize_city(v)


class CityLevelUpdate(BaseModel):
    city_name: Optional[str] = None
    level: Optional[int] = Field(default=None, ge=1, le=3)
    km: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("city_name")
    @classmethod
    def validate_city_name(cls, v):
        return normalize_city(v)


class CityLevelResponse(BaseModel):
    id: str
    city_name: str
    level: int
    km: Decimal

    class Config:
        from_attributes = True


class LevelCounts(BaseModel):
    level1: int = 0
    level2: int = 0
    level3: int = 0


class AgentBonusResponse(BaseModel):
    agentId: str
    agentName: str
    totalBonus: Decimal
    completed: int
    inProgress: int
    penalties: int
    completedByLevel: LevelCounts
    penaltiesByLevel: LevelCounts


class BonusReportResponse(BaseModel):
    year: int
    month: int
    monthStart: str
    monthEnd: str
    agents: list[AgentBonusResponse]
    totalBonus: Decimal
    totalCompleted: int
    totalPenalties: int
