from rangecore.domain.models import (
    AccessGrant,
    ConfigSection,
    DrillInstanceConfig,
    DrillTemplate,
    DrillTypeDefinition,
    DrillTypeId,
    ParamConstraint,
    PermissionSet,
    RoleChangeDecision,
    RoleSnapshot,
    TeamPermissionSet,
)
from rangecore.domain.normalize import normalize_org_role, normalize_team_role
from rangecore.domain.roles import OrgRole, RoleInfo, TeamRole, at_least, describe_org_role, describe_team_role, rank

__all__ = [
    "AccessGrant",
    "ConfigSection",
    "DrillInstanceConfig",
    "DrillTemplate",
    "DrillTypeDefinition",
    "DrillTypeId",
    "OrgRole",
    "ParamConstraint",
    "PermissionSet",
    "RoleChangeDecision",
    "RoleInfo",
    "RoleSnapshot",
    "TeamPermissionSet",
    "TeamRole",
    "at_least",
    "describe_org_role",
    "describe_team_role",
    "normalize_org_role",
    "normalize_team_role",
    "rank",
]
