"""Fleet service - Vehicles and vehicle availability"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Vehicle
from .repository import FleetRepository
from .schemas import VehicleCreate, VehicleUpdate

logger = logging.getLogger(__name__)


class FleetService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = FleetRepository()

    def get_vehicles(self) -> list[Vehicle]:
        return self.repo.get_vehicles(self.db)

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        vehicle = self.repo.get_vehicle(self.db, vehicle_id)
        if not vehicle:
            raise HTTPException(status_code=404, detail="Veículo não encontrado")
        return vehicle

    def _ensure_unique_plate(self, plate: str, exclude_id: Optional[str] = None) -> None:
        existing = self.repo.get_vehicle_by_plate(self.db, plate)
        if existing and existing.id != exclude_id:
            logger.warning(f"⚠️ Duplicate plate rejected: {plate}")
            raise HTTPException(status_code=409, detail="Já existe um veículo com esta placa")

    def create_vehicle(self, data: VehicleCreate) -> Vehicle:
        self._ensure_unique_plate(data.plate)
        try:
            vehicle = self.repo.create_vehicle(self.db, **data.model_dump())
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Já existe um veículo com esta placa") from e
        logger.info(f"✅ Vehicle created: {vehicle.model} ({vehicle.plate})")
        return vehicle

    def update_vehicle(self, vehicle_id: str, data: VehicleUpdate) -> Vehicle:
        vehicle = self.get_vehicle(vehicle_id)
        if data.plate is not None:
            self._ensure_unique_plate(data.plate, exclude_id=vehicle.id)
        try:
            vehicle = self.repo.update_vehicle(self.db, vehicle, **data.model_dump(exclude_unset=True))
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Já existe um veículo com esta placa") from e
        logger.info(f"✅ Vehicle updated: {vehicle.plate} status={vehicle.status}")
        return vehicle

    def delete_vehicle(self, vehicle_id: str) -> dict:
        vehicle = self.get_vehicle(vehicle_id)
        self.repo.delete_vehicle(self.db, vehicle)
        logger.info(f"🗑️ Vehicle deleted: {vehicle.plate}")
        return {"message": "Veículo removido"}

    def check_vehicle_availability(
        self,
        vehicle_id: str,
        day: date,
        time: str,
        appointment_id: Optional[str] = None,
    ) -> tuple[bool, Optional[str]]:
        """
        A vehicle is available when it is not in maintenance and no other
        non-cancelled appointment uses it at the same date and time.

        Returns (available, reason).
        """
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle.status == "maintenance":
            return False, "Veículo em manutenção"

        conflicts = self.repo.count_conflicting_appointments(
            self.db, vehicle_id, day, time, exclude_appointment_id=appointment_id
        )
        if conflicts:
            return False, "Veículo já reservado neste horário"
        return True, None
