"""Bonus router - FastAPI endpoints for the bonus report and schedule"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...database import get_db
from ...permissions import Capability, require
from .schemas import (
    BonusReportResponse,
    BonusSettingsResponse,
    BonusSettingsUpdate,
    CityLevelCreate,
    CityLevelResponse,
    CityLevelUpdate,
)
from .service import BonusService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bonus", tags=["Bonus"])


def get_bonus_service(db: Session = Depends(get_db)) -> BonusService:
    """Dependency injection for BonusService"""
    return BonusService(db)


# ============================================================================
# REPORT
# ============================================================================


@router.get("/report", response_model=BonusReportResponse)
async def get_bonus_report(
    year: int = Query(..., ge=2000, le=2200),
    month: int = Query(..., ge=1, le=12),
    session: SessionContext = Depends(require(Capability.ACCESS_BONUS)),
    service: BonusService = Depends(get_bonus_service),
):
    """Per-agent bonus totals for a month"""
    return service.get_report(year, month)


# ============================================================================
# SETTINGS
# ============================================================================


@router.get("/settings", response_model=BonusSettingsResponse)
async def get_bonus_settings(
    session: SessionContext = Depends(require(Capability.ACCESS_BONUS)),
    service: BonusService = Depends(get_bonus_service),
):
    return service.get_settings()


@router.put("/settings", response_model=BonusSettingsResponse)
async def update_bonus_settings(
    data: BonusSettingsUpdate,
    session: SessionContext = Depends(require(Capability.EDIT_BONUS)),
    service: BonusService = Depends(get_bonus_service),
):
    return service.update_settings(data, session.email)


# ============================================================================
# CITY LEVELS
# ============================================================================


@router.get("/cities", response_model=list[CityLevelResponse])
async def list_city_levels(
    session: SessionContext = Depends(require(Capability.ACCESS_BONUS)),
    service: BonusService = Depends(get_bonus_service),
):
    return service.get_city_levels()


@router.post("/cities", response_model=CityLevelResponse, status_code=201)
async def create_city_level(
    data: CityLevelCreate,
    session: SessionContext = Depends(require(Capability.EDIT_BONUS)),
    service: BonusService = Depends(get_bonus_service),
):
    return service.create_city_level(data)


@router.put("/cities/{city_id}", response_model=CityLevelResponse)
async def update_city_level(
    city_id: str,
    data: CityLevelUpdate,
    session: SessionContext = Depends(require(Capability.EDIT_BONUS)),
    service: BonusService = Depends(get_bonus_service),
):
    return service.update_city_level(city_id, data)


@router.delete("/cities/{city_id}")
async def delete_city_level(
    city_id: str,
    session: SessionContext = Depends(require(Capability.EDIT_BONUS)),
    service: BonusService = Depends(get_bonus_service),
):
    return service.delete_city_level(city_id)
