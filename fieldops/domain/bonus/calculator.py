"""
Per-visit bonus arithmetic.

Amounts stay Decimal from the settings row through the totals; rounding to
cents happens only when a report is rendered.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional, Protocol

ZERO = Decimal("0")
LEVELS = (1, 2, 3)
ONLINE_MARKER = "online"


class BonusSchedule(Protocol):
    base_value: Decimal
    level_1_value: Decimal
    level_2_value: Decimal
    level_3_value: Decimal


class VisitLike(Protocol):
    city: Optional[str]
    status: str
    is_penalized: bool


@dataclass
class AgentBonus:
    agent_id: str
    agent_name: str
    total_bonus: Decimal = ZERO
    completed: int = 0
    in_progress: int = 0
    penalties: int = 0
    completed_by_level: dict[int, int] = field(default_factory=lambda: dict.fromkeys(LEVELS, 0))
    penalties_by_level: dict[int, int] = field(default_factory=lambda: dict.fromkeys(LEVELS, 0))


def _money(value) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def level_value(settings: Optional[BonusSchedule], level: int) -> Decimal:
    if settings is None:
        return ZERO
    return _money(getattr(settings, f"level_{level}_value", None))


def build_city_index(city_levels: Iterable) -> dict[str, int]:
    """Upper-cased city name → level"""
    return {city.city_name.upper(): city.level for city in city_levels}


def is_online(city: Optional[str]) -> bool:
    return ONLINE_MARKER in (city or "").lower()


def visit_bonus(
    city: Optional[str], settings: Optional[BonusSchedule], city_index: dict[str, int]
) -> Decimal:
    """
    Payout for one completed, non-penalized visit.

    Online visits pay nothing. A configured city pays base plus its level
    value; any other city pays the base value only.
    """
    if is_online(city):
        return ZERO
    if settings is None:
        return ZERO

    amount = _money(settings.base_value)
    level = city_index.get((city or "").upper())
    if level is not None:
        amount += level_value(settings, level)
    return amount


def tally_agent(
    agent_id: str,
    agent_name: str,
    visits: Iterable[VisitLike],
    settings: Optional[BonusSchedule],
    city_index: dict[str, int],
) -> AgentBonus:
    result = AgentBonus(agent_id=agent_id, agent_name=agent_name)

    for visit in visits:
        if visit.status == "in_progress":
            result.in_progress += 1
            continue
        if visit.status != "completed":
            continue

        result.completed += 1
        level = city_index.get((visit.city or "").upper())
        if level in result.completed_by_level:
            result.completed_by_level[level] += 1

        if visit.is_penalized:
            result.penalties += 1
            if level in result.penalties_by_level:
                result.penalties_by_level[level] += 1
            continue

        result.total_bonus += visit_bonus(visit.city, settings, city_index)

    return result
