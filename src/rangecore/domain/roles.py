from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class OrgRole(str, Enum):
    UNIT_COMMANDER = "unit_commander"
    TEAM_COMMANDER = "team_commander"
    SQUAD_COMMANDER = "squad_commander"
    SOLDIER = "soldier"


class TeamRole(str, Enum):
    OWNER = "owner"
    COMMANDER = "commander"
    SQUAD_COMMANDER = "squad_commander"
    SOLDIER = "soldier"


ORG_ROLE_HIERARCHY: dict[OrgRole, int] = {
    OrgRole.UNIT_COMMANDER: 4,
    OrgRole.TEAM_COMMANDER: 3,
    OrgRole.SQUAD_COMMANDER: 2,
    OrgRole.SOLDIER: 1,
}

TEAM_ROLE_HIERARCHY: dict[TeamRole, int] = {
    TeamRole.OWNER: 4,
    TeamRole.COMMANDER: 3,
    TeamRole.SQUAD_COMMANDER: 2,
    TeamRole.SOLDIER: 1,
}

LOWEST_RANK = 1

_CANONICAL_ORG = frozenset(r.value for r in OrgRole)
_CANONICAL_TEAM = frozenset(r.value for r in TeamRole)

AnyRole = Union[OrgRole, TeamRole]


def rank(role: Optional[Union[AnyRole, str]]) -> int:
    """
    Total-order index of a role, higher = more privileged.
    Canonical role values are accepted as plain strings; the two axes agree on
    every shared value. Anything else ranks as a soldier.
    """
    if isinstance(role, OrgRole):
        return ORG_ROLE_HIERARCHY[role]
    if isinstance(role, TeamRole):
        return TEAM_ROLE_HIERARCHY[role]
    if isinstance(role, str):
        if role in _CANONICAL_ORG:
            return ORG_ROLE_HIERARCHY[OrgRole(role)]
        if role in _CANONICAL_TEAM:
            return TEAM_ROLE_HIERARCHY[TeamRole(role)]
    return LOWEST_RANK


def at_least(role: Optional[Union[AnyRole, str]], threshold: Union[AnyRole, str]) -> bool:
    return rank(role) >= rank(threshold)


@dataclass(frozen=True)
class RoleInfo:
    role: Optional[str]
    level: int
    display_name: str
    color: str
    icon: str


_ORG_STYLE: dict[OrgRole, tuple[str, str]] = {
    OrgRole.UNIT_COMMANDER: ("#FFD700", "shield-checkmark"),
    OrgRole.TEAM_COMMANDER: ("#FF6B6B", "star"),
    OrgRole.SQUAD_COMMANDER: ("#4ECDC4", "ribbon"),
    OrgRole.SOLDIER: ("#6B8FA3", "shield"),
}

_TEAM_STYLE: dict[TeamRole, tuple[str, str]] = {
    TeamRole.OWNER: ("#FFD700", "shield-checkmark"),
    TeamRole.COMMANDER: ("#FF6B6B", "star"),
    TeamRole.SQUAD_COMMANDER: ("#4ECDC4", "ribbon"),
    TeamRole.SOLDIER: ("#6B8FA3", "shield"),
}

_NO_ROLE = RoleInfo(role=None, level=0, display_name="No Role", color="#6B8FA3", icon="person")


def display_name(role: AnyRole) -> str:
    return " ".join(word.capitalize() for word in role.value.split("_"))


def describe_org_role(role: Optional[OrgRole]) -> RoleInfo:
    if role is None:
        return _NO_ROLE
    color, icon = _ORG_STYLE[role]
    return RoleInfo(role=role.value, level=rank(role), display_name=display_name(role), color=color, icon=icon)


def describe_team_role(role: Optional[TeamRole]) -> RoleInfo:
    if role is None:
        return _NO_ROLE
    color, icon = _TEAM_STYLE[role]
    return RoleInfo(role=role.value, level=rank(role), display_name=display_name(role), color=color, icon=icon)
