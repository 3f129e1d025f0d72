"""Fleet repository - Database operations for vehicles"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, Vehicle


class FleetRepository:
    @staticmethod
    def get_vehicles(db: Session) -> list[Vehicle]:
        return db.query(Vehicle).order_by(Vehicle.model).all()

    @staticmethod
    def get_vehicle(db: Session, vehicle_id: str) -> Optional[Vehicle]:
        return db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()

    @staticmethod
    def get_vehicle_by_plate(db: Session, plate: str) -> Optional[Vehicle]:
        return db.query(Vehicle).filter(Vehicle.plate == plate).first()

    @staticmethod
    def create_vehicle(db: Session, **data) -> Vehicle:
        vehicle = Vehicle(**data)
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle

    @staticmethod
    def update_vehicle(db: Session, vehicle: Vehicle, **updates) -> Vehicle:
        for key, value in updates.items():
            if hasattr(vehicle, key):
                setattr(vehicle, key, value)
        db.commit()
        db.refresh(vehicle)
        return vehicle

    @staticmethod
    def delete_vehicle(db: Session, vehicle: Vehicle) -> None:
        # appointments.vehicle_id is SET NULL on delete; do the same in the session
        for appointment in vehicle.appointments:
            appointment.vehicle_id = None
        db.delete(vehicle)
        db.commit()

    @staticmethod
    def count_conflicting_appointments(
        db: Session,
        vehicle_id: str,
        day: date,
        time: str,
        exclude_appointment_id: Optional[str] = None,
    ) -> int:
        query = db.query(Appointment).filter(
            Appointment.vehicle_id == vehicle_id,
            Appointment.date == day,
            Appointment.time == time,
            Appointment.status != "cancelled",
        )
        if exclude_appointment_id:
            query = query.filter(Appointment.id != exclude_appointment_id)
        return query.count()
