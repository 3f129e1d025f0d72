"""Appointment router - FastAPI endpoints for calendar visits"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...database import get_db
from ...permissions import Capability, require
from .schemas import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from .service import AppointmentService, to_response

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    year: int = Query(..., ge=2000, le=2200),
    month: int = Query(..., ge=1, le=12),
    agent_id: Optional[str] = Query(None, alias="agentId"),
    session: SessionContext = Depends(require(Capability.ACCESS_CALENDAR)),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments of a month with their agents and vehicle"""
    return [to_response(a) for a in service.get_month(year, month, agent_id)]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    session: SessionContext = Depends(require(Capability.ACCESS_CALENDAR)),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.get_appointment(appointment_id))


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    session: SessionContext = Depends(require(Capability.EDIT_CALENDAR)),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.create_appointment(data, session))


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    session: SessionContext = Depends(require(Capability.EDIT_CALENDAR)),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.update_appointment(appointment_id, data, session))


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    session: SessionContext = Depends(require(Capability.EDIT_CALENDAR)),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_appointment(appointment_id, session)


# ============================================================================
# CALENDAR ACTIONS
# ============================================================================


@router.patch("/{appointment_id}/date", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: str,
    data: AppointmentReschedule,
    session: SessionContext = Depends(require(Capability.EDIT_CALENDAR)),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Drag and drop; answers 409 when someone else moved it first"""
    return to_response(service.reschedule(appointment_id, data, session))


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def change_appointment_status(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    session: SessionContext = Depends(require(Capability.EDIT_CALENDAR)),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.change_status(appointment_id, data, session))
