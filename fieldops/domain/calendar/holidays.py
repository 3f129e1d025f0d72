"""
Holiday calendar for the Três Rios (RJ) operation.

Fixed-date holidays are matched on month/day only and apply to every year.
Carnaval, Sexta-feira Santa and Corpus Christi move with Easter and are kept in
per-year tables that an operator extends every year; a year without a table has
no movable holidays unless COMPUTE_MOVABLE_HOLIDAYS is enabled, in which case
they are derived from the Easter date.

When a date matches several tables the first one wins, in this order:
national, state, municipal, movable, local.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple, Optional, Union

from ...config import COMPUTE_MOVABLE_HOLIDAYS

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


class FixedHoliday(NamedTuple):
    month: int
    day: int
    name: str


class LocalHolidayEntry(NamedTuple):
    month: int
    day: int
    name: str
    year: Optional[int] = None  # None repeats every year


NATIONAL_HOLIDAYS = [
    FixedHoliday(1, 1, "Confraternização Universal"),
    FixedHoliday(4, 21, "Tiradentes"),
    FixedHoliday(5, 1, "Dia do Trabalho"),
    FixedHoliday(9, 7, "Independência do Brasil"),
    FixedHoliday(10, 12, "Nossa Senhora Aparecida"),
    FixedHoliday(11, 2, "Finados"),
    FixedHoliday(11, 15, "Proclamação da República"),
    FixedHoliday(11, 20, "Consciência Negra"),
    FixedHoliday(12, 25, "Natal"),
]

# Rio de Janeiro state
STATE_HOLIDAYS = [
    FixedHoliday(4, 23, "Dia de São Jorge"),
    FixedHoliday(11, 20, "Dia da Consciência Negra"),
]

# Três Rios
MUNICIPAL_HOLIDAYS = [
    FixedHoliday(1, 20, "Dia de São Sebastião"),
    FixedHoliday(7, 5, "Aniversário de Três Rios"),
]

# Must be extended every year
MOVABLE_HOLIDAYS = {
    2025: {
        "2025-03-03": "Carnaval",
        "2025-03-04": "Carnaval",
        "2025-04-18": "Sexta-feira Santa",
        "2025-06-19": "Corpus Christi",
    },
    2026: {
        "2026-02-16": "Carnaval",
        "2026-02-17": "Carnaval",
        "2026-04-03": "Sexta-feira Santa",
        "2026-06-04": "Corpus Christi",
    },
}


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def easter_sunday(year: int) -> date:
    """Easter Sunday in the Gregorian calendar (anonymous Gregorian algorithm)"""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def compute_movable_holidays(year: int) -> dict[str, str]:
    """Carnaval (Monday and Tuesday), Good Friday and Corpus Christi for a year"""
    easter = easter_sunday(year)
    offsets = [
        (-48, "Carnaval"),
        (-47, "Carnaval"),
        (-2, "Sexta-feira Santa"),
        (60, "Corpus Christi"),
    ]
    return {(easter + timedelta(days=offset)).isoformat(): name for offset, name in offsets}


class HolidayCalendar:
    """Answers "is this date a holiday" and "what is it called" """

    def __init__(
        self,
        local_holidays: Iterable[LocalHolidayEntry] = (),
        compute_movable: bool = False,
    ):
        self.local_holidays = list(local_holidays)
        self.compute_movable = compute_movable

    def movable_holidays(self, year: int) -> dict[str, str]:
        table = MOVABLE_HOLIDAYS.get(year)
        if table is not None:
            return table
        if self.compute_movable:
            return compute_movable_holidays(year)
        return {}

    def holiday_name(self, value: DateLike) -> Optional[str]:
        day = _as_date(value)

        for table in (NATIONAL_HOLIDAYS, STATE_HOLIDAYS, MUNICIPAL_HOLIDAYS):
            for holiday in table:
                if holiday.month == day.month and holiday.day == day.day:
                    return holiday.name

        movable = self.movable_holidays(day.year).get(day.isoformat())
        if movable:
            return movable

        for holiday in self.local_holidays:
            if holiday.month == day.month and holiday.day == day.day:
                if holiday.year is None or holiday.year == day.year:
                    return holiday.name

        return None

    def is_holiday(self, value: DateLike) -> bool:
        return self.holiday_name(value) is not None

    def holidays_in_year(self, year: int) -> list[tuple[date, str]]:
        """Every holiday of a year, one name per date, sorted by date"""
        candidates: list[date] = []
        for table in (NATIONAL_HOLIDAYS, STATE_HOLIDAYS, MUNICIPAL_HOLIDAYS):
            candidates.extend(date(year, h.month, h.day) for h in table)
        candidates.extend(date.fromisoformat(iso) for iso in self.movable_holidays(year))
        for holiday in self.local_holidays:
            if holiday.year is None or holiday.year == year:
                try:
                    candidates.append(date(year, holiday.month, holiday.day))
                except ValueError:
                    # 29/02 local holiday on a non-leap year
                    logger.debug(f"Skipping {holiday.name} ({holiday.day}/{holiday.month}) in {year}")

        return [(day, self.holiday_name(day)) for day in sorted(set(candidates))]


default_calendar = HolidayCalendar(compute_movable=COMPUTE_MOVABLE_HOLIDAYS)


def is_holiday(value: DateLike) -> bool:
    return default_calendar.is_holiday(value)


def holiday_name(value: DateLike) -> Optional[str]:
    return default_calendar.holiday_name(value)
