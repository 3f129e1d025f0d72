"""Shared validation utilities"""

import re
import uuid
from datetime import date
from typing import Annotated, Optional

from pydantic import AfterValidator

# Dates outside this range are refused: holiday tables and rest-day lookups add
# days to them
MIN_CALENDAR_YEAR = 1900
MAX_CALENDAR_YEAR = 2200


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError):
        return False


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("E-mail inválido")

    return email


def validate_username(username: Optional[str]) -> Optional[str]:
    """Usernames are lowercase letters, digits, dots, dashes and underscores"""
    if username is None:
        return username

    username = username.strip().lower()
    if not re.match(r"^[a-z0-9._-]{3,50}$", username):
        raise ValueError(
            "Nome de usuário deve ter entre 3 e 50 caracteres (letras, números, ponto, hífen ou sublinhado)"
        )
    return username


def validate_hex_color(color: Optional[str]) -> Optional[str]:
    """Calendar card colors are #RRGGBB"""
    if color is None:
        return color

    color = color.strip()
    if not re.match(r"^#[0-9a-fA-F]{6}$", color):
        raise ValueError("Cor deve estar no formato #RRGGBB")
    return color.lower()


def validate_plate(plate: Optional[str]) -> Optional[str]:
    """
    Normalize a Brazilian license plate.

    Accepts the old (ABC-1234) and Mercosul (ABC1D23) formats, with or without
    the dash, and stores them upper-cased without spaces.
    """
    if plate is None:
        return plate

    plate = re.sub(r"\s", "", plate).upper()
    if not re.match(r"^[A-Z]{3}-?[0-9][A-Z0-9][0-9]{2}$", plate):
        raise ValueError("Placa inválida")
    return plate


def validate_time(value: Optional[str]) -> Optional[str]:
    """HH:MM, 24h clock"""
    if value is None:
        return value

    value = value.strip()
    match = re.match(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])(:[0-5][0-9])?$", value)
    if not match:
        raise ValueError("Horário deve estar no formato HH:MM")
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def normalize_city(city: Optional[str]) -> Optional[str]:
    """City names are compared and stored trimmed and upper-cased"""
    if city is None:
        return city

    city = " ".join(city.split()).upper()
    if not city:
        raise ValueError("Nome da cidade é obrigatório")
    return city


def validate_calendar_date(value: Optional[date]) -> Optional[date]:
    if value is None:
        return value

    if not MIN_CALENDAR_YEAR <= value.year <= MAX_CALENDAR_YEAR:
        raise ValueError(
            f"Data fora do intervalo suportado ({MIN_CALENDAR_YEAR}-{MAX_CALENDAR_YEAR})"
        )
    return value


CalendarDate = Annotated[date, AfterValidator(validate_calendar_date)]
