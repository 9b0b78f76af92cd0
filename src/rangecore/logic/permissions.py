from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from rangecore.domain.models import AccessGrant, PermissionSet, RoleChangeDecision, RoleSnapshot, TeamPermissionSet
from rangecore.domain.normalize import normalize_org_role, normalize_team_role
from rangecore.domain.roles import TEAM_ROLE_HIERARCHY, OrgRole, TeamRole, at_least

# Minimum organization role per capability
ORG_THRESHOLDS: dict[str, OrgRole] = {
    "can_manage_org": OrgRole.UNIT_COMMANDER,
    "can_invite_members": OrgRole.TEAM_COMMANDER,
    "can_manage_members": OrgRole.TEAM_COMMANDER,
    "can_create_training": OrgRole.SQUAD_COMMANDER,
    "can_delete_training": OrgRole.TEAM_COMMANDER,
    "can_view_all_analytics": OrgRole.SQUAD_COMMANDER,
    "can_export_analytics": OrgRole.TEAM_COMMANDER,
}

TEAM_THRESHOLDS: dict[str, TeamRole] = {
    "can_manage_team": TeamRole.OWNER,
    "can_view_team_details": TeamRole.SOLDIER,
    "can_invite_to_team": TeamRole.COMMANDER,
    "can_remove_from_team": TeamRole.COMMANDER,
    "can_update_team_member_roles": TeamRole.COMMANDER,
    "can_manage_squads": TeamRole.COMMANDER,
    "can_manage_own_squad": TeamRole.SQUAD_COMMANDER,
    "can_view_all_squads": TeamRole.SOLDIER,
    "can_create_team_training": TeamRole.COMMANDER,
    "can_add_sessions_to_team": TeamRole.SOLDIER,
    "can_view_team_progress": TeamRole.SQUAD_COMMANDER,
    "can_view_own_progress": TeamRole.SOLDIER,
}


def resolve_permissions(role: Any) -> PermissionSet:
    """
    Organization capabilities for a role value.
    Missing or unrecognized roles get the all-false set.
    """
    org_role = normalize_org_role(role)
    if org_role is None:
        return PermissionSet()
    return PermissionSet(**{name: at_least(org_role, threshold) for name, threshold in ORG_THRESHOLDS.items()})


def resolve_team_permissions(team_role: Any) -> TeamPermissionSet:
    role = normalize_team_role(team_role)
    if role is None:
        return TeamPermissionSet()
    return TeamPermissionSet(**{name: at_least(role, threshold) for name, threshold in TEAM_THRESHOLDS.items()})


def has_permission(role: Any, permission: str) -> bool:
    if permission not in ORG_THRESHOLDS:
        return False
    return getattr(resolve_permissions(role), permission)


def has_team_permission(team_role: Any, permission: str) -> bool:
    if permission not in TEAM_THRESHOLDS:
        return False
    return getattr(resolve_team_permissions(team_role), permission)


def resolve_access(snapshot: Optional[RoleSnapshot]) -> AccessGrant:
    if snapshot is None:
        return AccessGrant()
    return AccessGrant(
        org_role=snapshot.org_role,
        team_role=snapshot.team_role,
        org=resolve_permissions(snapshot.org_role),
        team=resolve_team_permissions(snapshot.team_role),
    )


def snapshot_from_memberships(user_id: Optional[str], rows: Iterable[Mapping[str, Any]]) -> RoleSnapshot:
    """
    Build a RoleSnapshot from workspace membership rows as returned by the backend.

    A row belongs to the user when its `member_id` or `profile_id` matches. The
    organization role comes from `role`; the team role from the first entry of
    `teams` (`team_role`), falling back to a flat `team_role` column. Users
    without a matching row get an empty snapshot.
    """
    if not user_id:
        return RoleSnapshot()

    for row in rows:
        if not isinstance(row, Mapping):
            continue
        if user_id not in (row.get("member_id"), row.get("profile_id")):
            continue

        team_role_raw = row.get("team_role")
        team_id = row.get("team_id")
        teams = row.get("teams") or []
        if teams and isinstance(teams[0], Mapping):
            team_role_raw = teams[0].get("team_role", team_role_raw)
            team_id = teams[0].get("team_id", team_id)

        return RoleSnapshot(
            user_id=str(user_id),
            org_role=normalize_org_role(row.get("role")),
            team_role=normalize_team_role(team_role_raw),
            team_id=str(team_id) if team_id else None,
        )

    return RoleSnapshot(user_id=str(user_id))


def can_modify_team_role(actor: Any, target: Any) -> bool:
    """Whether a member holding `actor` may change or remove a member holding `target`."""
    actor_role = normalize_team_role(actor)
    target_role = normalize_team_role(target)
    if actor_role is None or target_role is None:
        return False
    if actor_role is TeamRole.OWNER:
        return True
    if actor_role is TeamRole.COMMANDER:
        return TEAM_ROLE_HIERARCHY[target_role] < TEAM_ROLE_HIERARCHY[TeamRole.COMMANDER]
    return False


def validate_role_change(actor: Any, target: Any, new_role: Any) -> RoleChangeDecision:
    actor_role = normalize_team_role(actor)
    target_role = normalize_team_role(target)
    next_role = normalize_team_role(new_role)
    if actor_role is None:
        return RoleChangeDecision(valid=False, reason="No active role")
    if target_role is None or next_role is None:
        return RoleChangeDecision(valid=False, reason="Unknown team role")

    if actor_role is target_role:
        return RoleChangeDecision(valid=False, reason="Cannot change the role of a member at your own level")

    if not can_modify_team_role(actor_role, target_role):
        return RoleChangeDecision(valid=False, reason=f"{actor_role.value}s cannot modify {target_role.value}s")

    if TEAM_ROLE_HIERARCHY[next_role] >= TEAM_ROLE_HIERARCHY[actor_role]:
        return RoleChangeDecision(valid=False, reason="Cannot assign a role equal to or higher than your own")

    return RoleChangeDecision(valid=True)


def can_join_team_as(team_role: Any) -> bool:
    # New members join as soldiers; promotions go through validate_role_change
    return normalize_team_role(team_role) is TeamRole.SOLDIER
