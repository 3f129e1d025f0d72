"""Vacations domain schemas - Vacations, time off and time bank"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import CalendarDate

BONUS_REASONS = ("TRE/TSE", "Liberado pela Chefia", "Troca de Feriado", "Atestado", "Licença Médica")
MEDICAL_REASONS = ("Atestado", "Licença Médica")


# ============================================================================
# VACATIONS
# ============================================================================


class VacationCreate(BaseModel):
    """The return date is always derived from start_date + days"""

    agent_id: str
    start_date: CalendarDate
    expiry_date: CalendarDate  # End of the acquisition period
    deadline: Optional[CalendarDate] = None  # Defaults to expiry + 11 months
    days: int = Field(default=30, ge=1, le=30)
    period_number: int = Field(default=1, ge=0, le=2)  # 0 = integral
    notes: Optional[str] = None


class VacationUpdate(BaseModel):
    expected_version: int
    agent_id: Optional[str] = None
    start_date: Optional[CalendarDate] = None
    expiry_date: Optional[CalendarDate] = None
    deadline: Optional[CalendarDate] = None
    days: Optional[int] = Field(default=None, ge=1, le=30)
    period_number: Optional[int] = Field(default=None, ge=0, le=2)
    notes: Optional[str] = None


class VacationResponse(BaseModel):
    id: str
    agent_id: str
    agent_name: Optional[str] = None
    start_date: date
    end_date: date
    days: int
    period_number: int
    expiry_date: Optional[date] = None
    deadline: Optional[date] = None
    notes: Optional[str] = None
    version: int

    class Config:
        from_attributes = True


class VacationReminderResponse(BaseModel):
    agent_id: str
    agent_name: str
    start_date: date
    days_until_start: int
    reminder_type: str


class AgentOnVacationResponse(BaseModel):
    agentId: str
    date: date
    onVacation: bool


# ============================================================================
# TIME OFF
# ============================================================================


class TimeOffBase(BaseModel):
    date: CalendarDate
    end_date: Optional[CalendarDate] = None
    agent_id: Optional[str] = None  # None = whole company
    type: Literal["full", "partial"] = "full"
    approved: bool = False
    bonus_reason: Optional[str] = None
    leave_days: Optional[int] = Field(default=None, ge=0)

    @field_validator("bonus_reason")
    @classmethod
    def validate_bonus_reason(cls, v):
        if v is not None and v not in BONUS_REASONS:
            raise ValueError(f"Motivo do abono inválido. Use um de: {', '.join(BONUS_REASONS)}")
        return v

    @model_validator(mode="after")
    def validate_range(self):
        if self.end_date is not None and self.end_date < self.date:
            raise ValueError("A data final não pode ser anterior à data inicial")
        # Leave days only apply to medical reasons
        if self.bonus_reason not in MEDICAL_REASONS:
            self.leave_days = None
        return self


class TimeOffCreate(TimeOffBase):
    pass


class TimeOffUpdate(TimeOffBase):
    pass


class TimeOffResponse(BaseModel):
    id: str
    date: date
    end_date: Optional[date] = None
    agent_id: Optional[str] = None
    agent_name: Optional[str] = None
    type: str
    approved: bool
    bonus_reason: Optional[str] = None
    leave_days: Optional[int] = None
    working_days: int

    class Config:
        from_attributes = True


# ============================================================================
# TIME BANK
# ============================================================================


class TimeBankAdjustment(BaseModel):
    hours: Decimal = Decimal("0")
    bonuses: int = 0
    description: Optional[str] = None

    @model_validator(mode="after")
    def validate_not_empty(self):
        if self.hours == 0 and self.bonuses == 0:
            raise ValueError("Informe ao menos horas ou abonos")
        return self


class TimeBankResponse(BaseModel):
    agent_id: str
    agent_name: Optional[str] = None
    accumulated_hours: Decimal
    bonuses: int


class TimeBankTransactionResponse(BaseModel):
    id: int
    agent_id: str
    hours_change: Decimal
    bonus_change: int
    transaction_type: str
    description: Optional[str] = None
    related_time_off_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
