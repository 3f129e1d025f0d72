"""
Role and sector based access rules.

Every predicate is a pure function of the caller's role and sector; none reads
the database or any other session state. The FastAPI dependency at the bottom
turns a capability into a 403 for routes.
"""

from enum import Enum
from typing import Callable, Optional

from fastapi import Depends, HTTPException


class Role(str, Enum):
    DEV = "dev"
    ADMIN = "admin"
    USER = "user"
    FINANCEIRO = "financeiro"


class Sector(str, Enum):
    COMERCIAL = "Comercial"
    SUPORTE = "Suporte"
    DESENVOLVIMENTO = "Desenvolvimento"
    ADMINISTRATIVO = "Administrativo"


class Capability(str, Enum):
    ACCESS_CALENDAR = "access_calendar"
    EDIT_CALENDAR = "edit_calendar"
    ACCESS_FLEET = "access_fleet"
    EDIT_FLEET = "edit_fleet"
    ACCESS_BONUS = "access_bonus"
    EDIT_BONUS = "edit_bonus"
    ACCESS_TEAM = "access_team"
    EDIT_TEAM = "edit_team"
    ACCESS_VACATIONS = "access_vacations"
    EDIT_VACATIONS = "edit_vacations"
    ACCESS_USER_MANAGEMENT = "access_user_management"
    EDIT_USER_MANAGEMENT = "edit_user_management"


class Page(str, Enum):
    DASHBOARD = "dashboard"
    CALENDAR = "calendar"
    FLEET = "fleet"
    BONUS = "bonus"
    TEAM = "team"
    VACATIONS = "vacations"
    USER_MANAGEMENT = "user_management"


RoleLike = Optional[str]
SectorLike = Optional[str]


def _value(item) -> Optional[str]:
    if isinstance(item, Enum):
        return item.value
    return item


def _is(role: RoleLike, expected: Role) -> bool:
    return _value(role) == expected.value


def _in_sectors(sector: SectorLike, *sectors: Sector) -> bool:
    return _value(sector) in {s.value for s in sectors}


# ============================================================================
# CAPABILITY PREDICATES
# ============================================================================


def can_access_calendar(role: RoleLike, sector: SectorLike) -> bool:
    return _is(role, Role.DEV) or _in_sectors(sector, Sector.COMERCIAL, Sector.ADMINISTRATIVO)


def can_edit_calendar(role: RoleLike, sector: SectorLike) -> bool:
    return _is(role, Role.DEV) or _in_sectors(sector, Sector.COMERCIAL)


def can_access_fleet(role: RoleLike, sector: SectorLike) -> bool:
    return _is(role, Role.DEV) or _in_sectors(sector, Sector.COMERCIAL, Sector.ADMINISTRATIVO)


def can_edit_fleet(role: RoleLike, sector: SectorLike) -> bool:
    return _is(role, Role.DEV) or (_in_sectors(sector, Sector.COMERCIAL) and _is(role, Role.ADMIN))


def can_access_bonus(role: RoleLike, sector: SectorLike) -> bool:
    return _is(role, Role.DEV) or _in_sectors(sector, Sector.COMERCIAL, Sector.ADMINISTRATIVO)


def can_edit_bonus(role: RoleLike, sector: SectorLike) -> bool:
    return _is(role, Role.DEV) or (_in_sectors(sector, Sector.COMERCIAL) and _is(role, Role.ADMIN))


def can_access_team(role: RoleLike, sector: SectorLike) -> bool:
    return True


def can_edit_team(role: RoleLike, sector: SectorLike) -> bool:
    return _is(role, Role.DEV) or _is(role, Role.ADMIN)


def can_access_vacations(role: RoleLike, sector: SectorLike) -> bool:
    return True


def can_edit_vacations(role: RoleLike, sector: SectorLike) -> bool:
    # Administrativo admins edit every sector's vacations, so no sector check here
    return _is(role, Role.DEV) or _is(role, Role.ADMIN)


def can_access_user_management(role: RoleLike, sector: SectorLike) -> bool:
    return _is(role, Role.DEV) or _is(role, Role.ADMIN)


def can_edit_user_management(
    role: RoleLike, sector: SectorLike, target_sector: SectorLike = None
) -> bool:
    """Admins manage their own sector; Comercial admins manage everyone"""
    if _is(role, Role.DEV):
        return True
    if not _is(role, Role.ADMIN):
        return False
    if _in_sectors(sector, Sector.COMERCIAL):
        return True
    if target_sector is None:
        return True
    return _value(target_sector) == _value(sector)


CAPABILITY_RULES: dict[Capability, Callable[[RoleLike, SectorLike], bool]] = {
    Capability.ACCESS_CALENDAR: can_access_calendar,
    Capability.EDIT_CALENDAR: can_edit_calendar,
    Capability.ACCESS_FLEET: can_access_fleet,
    Capability.EDIT_FLEET: can_edit_fleet,
    Capability.ACCESS_BONUS: can_access_bonus,
    Capability.EDIT_BONUS: can_edit_bonus,
    Capability.ACCESS_TEAM: can_access_team,
    Capability.EDIT_TEAM: can_edit_team,
    Capability.ACCESS_VACATIONS: can_access_vacations,
    Capability.EDIT_VACATIONS: can_edit_vacations,
    Capability.ACCESS_USER_MANAGEMENT: can_access_user_management,
    Capability.EDIT_USER_MANAGEMENT: can_edit_user_management,
}


def has_capability(role: RoleLike, sector: SectorLike, capability: Capability) -> bool:
    return CAPABILITY_RULES[capability](role, sector)


def capabilities(role: RoleLike, sector: SectorLike) -> dict[str, bool]:
    """Full capability map for a role/sector pair"""
    return {capability.value: rule(role, sector) for capability, rule in CAPABILITY_RULES.items()}


def restricts_to_own_sector(role: RoleLike, sector: SectorLike) -> bool:
    """Team and vacation lists only show the caller's own sector, except for dev and Administrativo"""
    return not _is(role, Role.DEV) and not _in_sectors(sector, Sector.ADMINISTRATIVO)


# ============================================================================
# PER-PAGE EDIT CHECK
# ============================================================================


def _dashboard_admin_rule(role: RoleLike, sector: SectorLike) -> bool:
    return True


# What an admin may edit on each page
PAGE_ADMIN_RULES: dict[Page, Callable[[RoleLike, SectorLike], bool]] = {
    Page.DASHBOARD: _dashboard_admin_rule,
    Page.CALENDAR: can_edit_calendar,
    Page.FLEET: can_edit_fleet,
    Page.BONUS: can_edit_bonus,
    Page.TEAM: can_edit_team,
    Page.VACATIONS: can_edit_vacations,
    Page.USER_MANAGEMENT: can_edit_user_management,
}

_unmapped_pages = set(Page) - set(PAGE_ADMIN_RULES)
if _unmapped_pages:
    raise RuntimeError(f"Pages without an edit rule: {sorted(p.value for p in _unmapped_pages)}")

USER_EDITABLE_PAGES = {Page.DASHBOARD, Page.CALENDAR}


def can_edit_page(role: RoleLike, sector: SectorLike, page: Page) -> bool:
    page = Page(page)
    if _is(role, Role.DEV):
        return True
    if _is(role, Role.ADMIN):
        return PAGE_ADMIN_RULES[page](role, sector)
    if _is(role, Role.USER):
        return page in USER_EDITABLE_PAGES and _in_sectors(sector, Sector.COMERCIAL)
    # financeiro and callers without a role
    return False


# ============================================================================
# FASTAPI DEPENDENCIES
# ============================================================================


def require(capability: Capability):
    """
    Dependency factory that rejects callers lacking a capability.

    Usage:
        @router.post("", dependencies=[Depends(require(Capability.EDIT_FLEET))])
    """
    from .auth import SessionContext, get_session_context

    async def checker(session: SessionContext = Depends(get_session_context)) -> SessionContext:
        if not has_capability(session.role, session.sector, capability):
            raise HTTPException(
                status_code=403,
                detail="Você não tem permissão para realizar esta ação.",
            )
        return session

    return checker
