"""Caller identity and the permission matrix of every acts operation.

Each operation has one policy function here; services call it instead of
checking roles inline.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from src.models import Act
from src.services.domain import ContractInfo, ReportMode
from src.services.errors import PermissionDeniedError


class Role(str, Enum):
    """Capability of an authenticated caller, derived from its organization."""

    AKIMAT = "AKIMAT"
    KGU = "KGU"
    TOO = "TOO"
    CONTRACTOR = "CONTRACTOR"
    LANDFILL = "LANDFILL"
    DRIVER = "DRIVER"

    @classmethod
    def parse(cls, raw: str | None) -> "Role":
        """Parse a role name case-insensitively.

        Raises:
            ValueError: If the name is unknown
        """
        return cls((raw or "").strip().upper())


@dataclass(frozen=True)
class Principal:
    """Authenticated caller: organization, user and role."""

    org_id: uuid.UUID
    user_id: uuid.UUID
    role: Role


DEFAULT_GENERATE_ROLES = frozenset({Role.AKIMAT, Role.KGU, Role.CONTRACTOR, Role.LANDFILL})
OVERSIGHT_ROLES = frozenset({Role.AKIMAT, Role.KGU})

REPORT_ROLES: dict[ReportMode, frozenset[Role]] = {
    ReportMode.CONTRACTOR: frozenset({Role.AKIMAT, Role.KGU, Role.CONTRACTOR}),
    ReportMode.LANDFILL: frozenset({Role.AKIMAT, Role.KGU, Role.LANDFILL}),
}


def generation_roles(configured: Iterable[str] | None = None) -> frozenset[Role]:
    """Roles allowed to generate acts. Drivers are never allowed."""
    if not configured:
        return DEFAULT_GENERATE_ROLES
    roles = set()
    for name in configured:
        try:
            roles.add(Role.parse(name))
        except ValueError:
            continue
    roles.discard(Role.DRIVER)
    return frozenset(roles)


def require_role(principal: Principal, allowed: Iterable[Role]) -> None:
    if principal.role not in set(allowed):
        raise PermissionDeniedError("permission denied")


def authorize_act_generation(principal: Principal, allowed: Iterable[Role] = DEFAULT_GENERATE_ROLES) -> None:
    if principal.role is Role.DRIVER:
        raise PermissionDeniedError("permission denied")
    require_role(principal, allowed)


def authorize_contract_access(principal: Principal, contract: ContractInfo) -> None:
    """Contractors may only bill their own contracts."""
    if principal.role is Role.CONTRACTOR and principal.org_id != contract.contractor_id:
        raise PermissionDeniedError("permission denied")


def authorize_act_decision(principal: Principal, act: Act) -> None:
    """Only the landfill recorded on the act may approve or reject it."""
    require_role(principal, {Role.LANDFILL})
    if act.landfill_id is None or act.landfill_id != principal.org_id:
        raise PermissionDeniedError("permission denied")


def authorize_act_view(principal: Principal, act: Act) -> None:
    if principal.role is Role.LANDFILL:
        if act.landfill_id is None or act.landfill_id != principal.org_id:
            raise PermissionDeniedError("permission denied")
    elif principal.role is Role.CONTRACTOR:
        if act.contractor_id is None or act.contractor_id != principal.org_id:
            raise PermissionDeniedError("permission denied")
    elif principal.role not in OVERSIGHT_ROLES:
        raise PermissionDeniedError("permission denied")


def authorize_report_mode(principal: Principal, mode: ReportMode) -> None:
    require_role(principal, REPORT_ROLES[mode])


def authorize_report_target(principal: Principal, mode: ReportMode, target_id: uuid.UUID) -> None:
    """Contractors may only export their own contractor report."""
    if mode is ReportMode.CONTRACTOR and principal.role is Role.CONTRACTOR and principal.org_id != target_id:
        raise PermissionDeniedError("permission denied")


__all__ = [
    "Role",
    "Principal",
    "DEFAULT_GENERATE_ROLES",
    "REPORT_ROLES",
    "generation_roles",
    "require_role",
    "authorize_act_generation",
    "authorize_contract_access",
    "authorize_act_decision",
    "authorize_act_view",
    "authorize_report_mode",
    "authorize_report_target",
]
