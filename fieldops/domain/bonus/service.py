"""Bonus service - Monthly bonus report and schedule maintenance"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Agent, BonusSettings, CityBonusLevel
from ..calendar.business_days import month_bounds
from .calculator import AgentBonus, build_city_index, tally_agent
from .repository import BonusRepository
from .schemas import (
    AgentBonusResponse,
    BonusReportResponse,
    BonusSettingsUpdate,
    CityLevelCreate,
    CityLevelUpdate,
    LevelCounts,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class BonusService:
    """Service layer for bonus business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BonusRepository()

    # ------------------------------------------------------------------
    # Report
    # ------------------------------------------------------------------

    def compute_bonuses(
        self,
        agents: list[Agent],
        settings: Optional[BonusSettings],
        city_levels: list[CityBonusLevel],
        month_start: date,
        month_end: date,
    ) -> list[AgentBonus]:
        """
        Tally each agent's visits in [month_start, month_end].

        A lookup that fails for one agent is logged and that agent is reported
        with zero totals; the rest of the report is still produced.
        """
        city_index = build_city_index(city_levels)
        bonuses = []

        for agent in agents:
            try:
                appointment_ids = self.repo.get_assigned_appointment_ids(self.db, agent.id)
                if not appointment_ids:
                    bonuses.append(AgentBonus(agent_id=agent.id, agent_name=agent.name))
                    continue

                visits = self.repo.get_appointments_in_range(
                    self.db, appointment_ids, month_start, month_end
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Failed to load appointments for agent {agent.id}: {str(e)}")
                bonuses.append(AgentBonus(agent_id=agent.id, agent_name=agent.name))
                continue

            bonuses.append(tally_agent(agent.id, agent.name, visits, settings, city_index))

        return bonuses

    def get_report(self, year: int, month: int) -> BonusReportResponse:
        month_start, month_end = month_bounds(year, month)

        agents = self.repo.get_bonus_agents(self.db)
        settings = self.repo.get_settings(self.db)
        city_levels = self.repo.get_city_levels(self.db)

        if settings is None:
            logger.warning("⚠️ Bonus settings not configured - every amount will be zero")

        bonuses = self.compute_bonuses(agents, settings, city_levels, month_start, month_end)
        logger.info(f"📊 Bonus report {month:02d}/{year}: {len(bonuses)} agents")

        rows = [
            AgentBonusResponse(
                agentId=b.agent_id,
                agentName=b.agent_name,
                totalBonus=to_cents(b.total_bonus),
                completed=b.completed,
                inProgress=b.in_progress,
                penalties=b.penalties,
                completedByLevel=LevelCounts(
                    level1=b.completed_by_level[1],
                    level2=b.completed_by_level[2],
                    level3=b.completed_by_level[3],
                ),
                penaltiesByLevel=LevelCounts(
                    level1=b.penalties_by_level[1],
                    level2=b.penalties_by_level[2],
                    level3=b.penalties_by_level[3],
                ),
            )
            for b in bonuses
        ]

        return BonusReportResponse(
            year=year,
            month=month,
            monthStart=month_start.isoformat(),
            monthEnd=month_end.isoformat(),
            agents=rows,
            totalBonus=to_cents(sum((b.total_bonus for b in bonuses), Decimal("0"))),
            totalCompleted=sum(b.completed for b in bonuses),
            totalPenalties=sum(b.penalties for b in bonuses),
        )

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self) -> dict:
        settings = self.repo.get_settings(self.db)
        if not settings:
            zero = Decimal("0.00")
            return {
                "base_value": zero,
                "level_1_value": zero,
                "level_2_value": zero,
                "level_3_value": zero,
            }
        return {
            "base_value": settings.base_value,
            "level_1_value": settings.level_1_value,
            "level_2_value": settings.level_2_value,
            "level_3_value": settings.level_3_value,
        }

    def update_settings(self, data: BonusSettingsUpdate, updated_by: str) -> BonusSettings:
        settings = self.repo.save_settings(self.db, **data.model_dump())
        logger.info(f"✅ Bonus settings updated by {updated_by}")
        return settings

    # ------------------------------------------------------------------
    # City levels
    # ------------------------------------------------------------------

    def get_city_levels(self) -> list[CityBonusLevel]:
        return self.repo.get_city_levels(self.db)

    def get_city_level(self, city_id: str) -> CityBonusLevel:
        city = self.repo.get_city_level(self.db, city_id)
        if not city:
            raise HTTPException(status_code=404, detail="Cidade não encontrada")
        return city

    def _ensure_unique_city(self, city_name: str, exclude_id: Optional[str] = None) -> None:
        for city in self.repo.get_city_levels(self.db):
            if city.city_name.upper() == city_name.upper() and city.id != exclude_id:
                logger.warning(f"⚠️ Duplicate city rejected: {city_name}")
                raise HTTPException(status_code=409, detail="Esta cidade já está cadastrada")

    def create_city_level(self, data: CityLevelCreate) -> CityBonusLevel:
        self._ensure_unique_city(data.city_name)
        try:
            city = self.repo.create_city_level(self.db, **data.model_dump())
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Esta cidade já está cadastrada") from e
        logger.info(f"✅ City bonus level created: {city.city_name} (level {city.level})")
        return city

    def update_city_level(self, city_id: str, data: CityLevelUpdate) -> CityBonusLevel:
        city = self.get_city_level(city_id)
        if data.city_name is not None:
            self._ensure_unique_city(data.city_name, exclude_id=city.id)
        try:
            city = self.repo.update_city_level(self.db, city, **data.model_dump())
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Esta cidade já está cadastrada") from e
        logger.info(f"✅ City bonus level updated: {city.city_name} (level {city.level})")
        return city

    def delete_city_level(self, city_id: str) -> dict:
        city = self.get_city_level(city_id)
        self.repo.delete_city_level(self.db, city)
        logger.info(f"🗑️ City bonus level deleted: {city.city_name}")
        return {"message": "Cidade removida"}
