import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a UUID primary key (same format the auth provider uses for user ids)"""
    return str(uuid.uuid4())


class Profile(Base):
    """Application profile for an identity owned by the hosted auth provider"""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)  # Auth provider user id
    username = Column(String(100), unique=True, index=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    sector = Column(String(50), nullable=True)  # Comercial, Suporte, Desenvolvimento, Administrativo
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    role = relationship(
        "UserRole", back_populates="profile", uselist=False, cascade="all, delete-orphan"
    )
    agent = relationship("Agent", back_populates="user", uselist=False)


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    role = Column(String(20), nullable=False, default="user")  # dev, admin, user, financeiro
    created_at = Column(DateTime, server_default=func.now())

    profile = relationship("Profile", back_populates="role")


class Agent(Base):
    """Field technician"""

    __tablename__ = "agents"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    sector = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    color = Column(String(7), nullable=True, default="#3b82f6")  # #RRGGBB for calendar cards
    receives_bonus = Column(Boolean, default=True, nullable=False)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=True, unique=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("Profile", back_populates="agent")
    assignments = relationship("AppointmentAgent", back_populates="agent")
    vacations = relationship("Vacation", back_populates="agent")


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=generate_id)
    model = Column(String(100), nullable=False)
    plate = Column(String(10), unique=True, index=True, nullable=False)  # Stored upper-cased
    status = Column(String(20), default="available", nullable=False)  # available, in_use, maintenance
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    appointments = relationship("Appointment", back_populates="vehicle")


class Appointment(Base):
    """Scheduled field visit"""

    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    city = Column(String(255), nullable=False)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # HH:MM

    # Status workflow: scheduled → in_progress → completed, or cancelled at any point
    status = Column(String(20), default="scheduled", nullable=False, index=True)
    expense_status = Column(String(30), default="do-not-separate", nullable=False)
    is_penalized = Column(Boolean, default=False, nullable=False)  # Excludes the visit from bonus
    appointment_type = Column(String(50), nullable=True)

    vehicle_id = Column(String(36), ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True)

    # Bumped on every write; updates must present the version they read
    version = Column(Integer, default=1, nullable=False)

    # Last-action stamps shown on calendar cards (no history is kept)
    created_by = Column(String(36), nullable=True)
    created_by_name = Column(String(255), nullable=True)
    updated_by_name = Column(String(255), nullable=True)
    last_action = Column(String(20), nullable=True)  # updated, deleted
    last_action_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    vehicle = relationship("Vehicle", back_populates="appointments")
    assignments = relationship(
        "AppointmentAgent", back_populates="appointment", cascade="all, delete-orphan"
    )

    @property
    def agents(self):
        return [assignment.agent for assignment in self.assignments if assignment.agent]


class AppointmentAgent(Base):
    """Many-to-many join between appointments and agents"""

    __tablename__ = "appointment_agents"
    __table_args__ = (UniqueConstraint("appointment_id", "agent_id", name="uq_appointment_agent"),)

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(
        String(36), ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    agent_id = Column(String(36), ForeignKey("agents.id"), nullable=False, index=True)

    appointment = relationship("Appointment", back_populates="assignments")
    agent = relationship("Agent", back_populates="assignments")


class Vacation(Base):
    __tablename__ = "vacations"

    id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # Return date, always start_date + days
    days = Column(Integer, nullable=False, default=30)
    period_number = Column(Integer, nullable=False, default=1)  # 0 = integral, 1 or 2
    expiry_date = Column(Date, nullable=True)  # End of the acquisition period
    deadline = Column(Date, nullable=True)  # End of the concession period
    notes = Column(Text, nullable=True)
    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    agent = relationship("Agent", back_populates="vacations")


class TimeOff(Base):
    __tablename__ = "time_off"

    id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.id"), nullable=True)  # Null = company-wide
    date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    type = Column(String(10), default="full", nullable=False)  # full, partial
    approved = Column(Boolean, default=False, nullable=False)
    bonus_reason = Column(String(50), nullable=True)  # Set when the day off is paid by a bonus day
    leave_days = Column(Integer, nullable=True)  # Medical leave only
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    agent = relationship("Agent")


class BonusSettings(Base):
    """Singleton row with the per-visit bonus schedule"""

    __tablename__ = "bonus_settings"

    id = Column(Integer, primary_key=True, index=True)
    base_value = Column(Numeric(10, 2), default=0, nullable=False)
    level_1_value = Column(Numeric(10, 2), default=0, nullable=False)
    level_2_value = Column(Numeric(10, 2), default=0, nullable=False)
    level_3_value = Column(Numeric(10, 2), default=0, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class CityBonusLevel(Base):
    __tablename__ = "city_bonus_levels"

    id = Column(String(36), primary_key=True, default=generate_id)
    city_name = Column(String(255), unique=True, nullable=False)  # Stored upper-cased
    level = Column(Integer, nullable=False)  # 1, 2 or 3
    km = Column(Numeric(8, 1), default=0, nullable=False)  # Informational
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class TimeBank(Base):
    __tablename__ = "time_bank"

    id = Column(Integer, primary_key=True, index=True)
    agent_id = Column(String(36), ForeignKey("agents.id"), unique=True, nullable=False)
    accumulated_hours = Column(Numeric(8, 2), default=0, nullable=False)  # Negative = owes hours
    bonuses = Column(Integer, default=0, nullable=False)  # Bonus days available
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    agent = relationship("Agent")


class TimeBankTransaction(Base):
    __tablename__ = "time_bank_transactions"

    id = Column(Integer, primary_key=True, index=True)
    agent_id = Column(String(36), ForeignKey("agents.id"), nullable=False, index=True)
    hours_change = Column(Numeric(8, 2), default=0, nullable=False)
    bonus_change = Column(Integer, default=0, nullable=False)
    transaction_type = Column(String(30), nullable=False)  # credit, adjustment, debit_hours, debit_bonus
    description = Column(String(500), nullable=True)
    related_time_off_id = Column(String(36), ForeignKey("time_off.id", ondelete="SET NULL"), nullable=True)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class LocalHoliday(Base):
    """Operator-maintained holiday; a null year repeats every year"""

    __tablename__ = "local_holidays"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    day = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
