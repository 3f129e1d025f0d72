import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fieldops.db")

# Hosted auth provider (issues the bearer tokens, owns identities)
AUTH_PROVIDER_URL = os.getenv("AUTH_PROVIDER_URL", "").rstrip("/")
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")
# Service-role key for the provider's admin API - only used by user management
AUTH_SERVICE_ROLE_KEY = os.getenv("AUTH_SERVICE_ROLE_KEY")
AUTH_ADMIN_TIMEOUT = float(os.getenv("AUTH_ADMIN_TIMEOUT", "15"))

# Security - CRITICAL: No default JWT secret in production
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
if not AUTH_JWT_SECRET:
    import warnings

    warnings.warn(
        "AUTH_JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    AUTH_JWT_SECRET = "INSECURE-DEV-SECRET-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

# Frontend base URL, used as the default CORS origin
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")
    if origin.strip()
]

# Holiday calendar
# Static Carnaval/Good Friday/Corpus Christi tables only cover the years listed in
# domain/calendar/holidays.py. Set to true to compute them from Easter for other years.
COMPUTE_MOVABLE_HOLIDAYS = os.getenv("COMPUTE_MOVABLE_HOLIDAYS", "false").lower() == "true"

# Vacations / time bank
VACATION_REMINDER_DAYS = [
    int(days) for days in os.getenv("VACATION_REMINDER_DAYS", "30,60").split(",") if days.strip()
]
TIME_BANK_HOURS_PER_DAY = int(os.getenv("TIME_BANK_HOURS_PER_DAY", "8"))
