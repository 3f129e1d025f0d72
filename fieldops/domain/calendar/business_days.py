"""
Business-day rules used to validate vacation and time-off dates.

Only Sunday counts as the weekly paid rest day (DSR); Saturday is a working day
for rest-day purposes. Return dates are plain calendar arithmetic even though
the start date is constrained by the rest-day rules.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from .holidays import HolidayCalendar, default_calendar

DateLike = Union[date, datetime]

SUNDAY = 6
FRIDAY = 4
SATURDAY = 5

# Months between the end of the acquisition period and the concession deadline
CONCESSION_PERIOD_MONTHS = 11


class VacationRuleViolation(ValueError):
    """A vacation start date rejected by labor rules"""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_weekend_or_holiday(value: DateLike, calendar: Optional[HolidayCalendar] = None) -> bool:
    """Sunday or holiday"""
    calendar = calendar or default_calendar
    day = _as_date(value)
    return day.weekday() == SUNDAY or calendar.is_holiday(day)


def is_before_weekend_or_holiday(value: DateLike, calendar: Optional[HolidayCalendar] = None) -> bool:
    """Friday, or the next day is a holiday"""
    calendar = calendar or default_calendar
    day = _as_date(value)
    if day.weekday() == FRIDAY:
        return True
    return calendar.is_holiday(day + timedelta(days=1))


def is_two_days_before_weekend_or_holiday(
    value: DateLike, calendar: Optional[HolidayCalendar] = None
) -> bool:
    """True when one of the next two days is a rest day (Sunday or holiday)"""
    day = _as_date(value)
    return is_weekend_or_holiday(day + timedelta(days=1), calendar) or is_weekend_or_holiday(
        day + timedelta(days=2), calendar
    )


def calculate_return_date(start_date: str, days: int) -> str:
    """Start date plus `days` calendar days, as yyyy-MM-dd"""
    start = date.fromisoformat(start_date)
    return (start + timedelta(days=days)).isoformat()


def count_working_days(
    start: date, end: Optional[date], calendar: Optional[HolidayCalendar] = None
) -> int:
    """
    Working days in [start, end], skipping Saturdays, Sundays and holidays.

    Time-off deductions are charged per working day, so a missing or inverted
    range and a range with no working day both count as one day.
    """
    calendar = calendar or default_calendar
    if end is None or end < start:
        return 1

    working_days = 0
    current = start
    while current <= end:
        if current.weekday() < SATURDAY and not calendar.is_holiday(current):
            working_days += 1
        current += timedelta(days=1)

    return working_days or 1


def concession_deadline(acquisition_expiry: date) -> date:
    return acquisition_expiry + relativedelta(months=CONCESSION_PERIOD_MONTHS)


def validate_vacation_start(
    start: date,
    expiry_date: Optional[date] = None,
    deadline: Optional[date] = None,
    calendar: Optional[HolidayCalendar] = None,
) -> None:
    """
    Check a vacation start date against the labor rules, in order:

    1. It cannot be a Sunday or holiday.
    2. It cannot be one of the two days before a Sunday or holiday.
    3. It cannot be before the end of the acquisition period.
    4. It cannot be after the concession deadline.

    Raises:
        VacationRuleViolation: with the code of the first rule broken
    """
    calendar = calendar or default_calendar

    if is_weekend_or_holiday(start, calendar):
        name = calendar.holiday_name(start)
        if name:
            message = (
                f"Não é permitido iniciar férias em feriado ({name}). "
                "As férias devem começar em dia útil."
            )
        else:
            message = (
                "Não é permitido iniciar férias em dia de Descanso Semanal Remunerado. "
                "As férias devem começar em dia útil."
            )
        raise VacationRuleViolation("rest_day", message)

    if is_two_days_before_weekend_or_holiday(start, calendar):
        raise VacationRuleViolation(
            "two_days_before_rest_day",
            "Não é permitido iniciar férias nos dois dias que antecedem um feriado "
            "ou domingo (dia de descanso semanal remunerado).",
        )

    if expiry_date and deadline:
        if start < expiry_date:
            raise VacationRuleViolation(
                "before_acquisition_expiry",
                "As férias só podem iniciar a partir do vencimento do período aquisitivo "
                f"({expiry_date.strftime('%d/%m/%Y')}).",
            )
        if start > deadline:
            raise VacationRuleViolation(
                "after_concession_deadline",
                f"As férias devem iniciar até a data limite ({deadline.strftime('%d/%m/%Y')}).",
            )


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month"""
    return date(year, month, 1), date(year, month, 1) + relativedelta(day=31)
