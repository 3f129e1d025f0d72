"""Fleet domain schemas"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_plate

VehicleStatus = Literal["available", "in_use", "maintenance"]


class VehicleCreate(BaseModel):
    model: str
    plate: str
    status: VehicleStatus = "available"

    @field_validator("model")
    @classmethod
    def validate_model(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Modelo é obrigatório")
        return v

    @field_validator("plate")
    @classmethod
    def validate_plate(cls, v):
        return validate_plate(v)


class VehicleUpdate(BaseModel):
    model: Optional[str] = None
    plate: Optional[str] = None
    status: Optional[VehicleStatus] = None

    @field_validator("model", "plate", "status")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Campo não pode ser nulo")
        return v

    @field_validator("plate")
    @classmethod
    def validate_plate(cls, v):
        return validate_plate(v)


class VehicleResponse(BaseModel):
    id: str
    model: str
    plate: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VehicleAvailabilityResponse(BaseModel):
    vehicleId: str
    date: date
    time: str
    available: bool
    reason: Optional[str] = None
