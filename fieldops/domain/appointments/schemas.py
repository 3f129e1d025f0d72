"""Appointment domain schemas - Pydantic models for validation"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import CalendarDate, validate_time

AppointmentStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]
ExpenseStatus = Literal["do-not-separate", "separate-cash", "separate-day-before"]


def _required_text(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{label} é obrigatório")
    return value


class AppointmentCreate(BaseModel):
    title: str
    description: Optional[str] = None
    city: str
    date: CalendarDate
    time: str
    status: AppointmentStatus = "scheduled"
    expense_status: ExpenseStatus = "do-not-separate"
    is_penalized: bool = False
    appointment_type: Optional[str] = None
    vehicle_id: Optional[str] = None
    agent_ids: list[str] = []

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _required_text(v, "Título")

    @field_validator("city")
    @classmethod
    def validate_city(cls, v):
        return _required_text(v, "Cidade")

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time(v)


class AppointmentUpdate(BaseModel):
    """Every write carries the version the client read"""

    expected_version: int
    title: Optional[str] = None
    description: Optional[str] = None
    city: Optional[str] = None
    date: Optional[CalendarDate] = None
    time: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    expense_status: Optional[ExpenseStatus] = None
    is_penalized: Optional[bool] = None
    appointment_type: Optional[str] = None
    vehicle_id: Optional[str] = None
    agent_ids: Optional[list[str]] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time(v)


class AppointmentReschedule(BaseModel):
    """Calendar drag and drop"""

    date: CalendarDate
    expected_version: int


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    is_penalized: Optional[bool] = None
    expected_version: int


class AssignedAgent(BaseModel):
    id: str
    name: str
    color: Optional[str] = None


class AssignedVehicle(BaseModel):
    id: str
    model: str
    plate: str


class AppointmentResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    city: str
    date: dt.date
    time: str
    status: str
    expense_status: str
    is_penalized: bool
    appointment_type: Optional[str] = None
    vehicle: Optional[AssignedVehicle] = None
    agents: list[AssignedAgent] = []
    version: int
    created_by_name: Optional[str] = None
    updated_by_name: Optional[str] = None
    last_action: Optional[str] = None
    last_action_at: Optional[dt.datetime] = None
