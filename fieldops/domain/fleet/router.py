"""Fleet router - FastAPI endpoints for vehicles"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...database import get_db
from ...permissions import Capability, require
from ...shared.validators import CalendarDate, validate_time
from .schemas import VehicleAvailabilityResponse, VehicleCreate, VehicleResponse, VehicleUpdate
from .service import FleetService

router = APIRouter(prefix="/fleet", tags=["Fleet"])


def get_fleet_service(db: Session = Depends(get_db)) -> FleetService:
    """Dependency injection for FleetService"""
    return FleetService(db)


@router.get("", response_model=list[VehicleResponse])
async def list_vehicles(
    session: SessionContext = Depends(require(Capability.ACCESS_FLEET)),
    service: FleetService = Depends(get_fleet_service),
):
    return service.get_vehicles()


@router.post("", response_model=VehicleResponse, status_code=201)
async def create_vehicle(
    data: VehicleCreate,
    session: SessionContext = Depends(require(Capability.EDIT_FLEET)),
    service: FleetService = Depends(get_fleet_service),
):
    return service.create_vehicle(data)


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: str,
    session: SessionContext = Depends(require(Capability.ACCESS_FLEET)),
    service: FleetService = Depends(get_fleet_service),
):
    return service.get_vehicle(vehicle_id)


@router.patch("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: str,
    data: VehicleUpdate,
    session: SessionContext = Depends(require(Capability.EDIT_FLEET)),
    service: FleetService = Depends(get_fleet_service),
):
    return service.update_vehicle(vehicle_id, data)


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: str,
    session: SessionContext = Depends(require(Capability.EDIT_FLEET)),
    service: FleetService = Depends(get_fleet_service),
):
    return service.delete_vehicle(vehicle_id)


@router.get("/{vehicle_id}/availability", response_model=VehicleAvailabilityResponse)
async def get_vehicle_availability(
    vehicle_id: str,
    day: CalendarDate = Query(..., alias="date"),
    time: str = Query(...),
    appointment_id: Optional[str] = Query(None, alias="appointmentId"),
    session: SessionContext = Depends(require(Capability.ACCESS_CALENDAR)),
    service: FleetService = Depends(get_fleet_service),
):
    """Whether a vehicle is free at a date and time (the appointment being edited is ignored)"""
    try:
        time = validate_time(time)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    available, reason = service.check_vehicle_availability(vehicle_id, day, time, appointment_id)
    return VehicleAvailabilityResponse(
        vehicleId=vehicle_id, date=day, time=time, available=available, reason=reason
    )
