from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from rangecore.api.deps import get_caller, require_auth
from rangecore.domain import (
    RoleSnapshot,
    describe_org_role,
    describe_team_role,
    normalize_org_role,
    normalize_team_role,
)
from rangecore.logic import resolve_access, snapshot_from_memberships, validate_role_change

router = APIRouter(prefix="/v1", tags=["permissions"])


class MembershipLookup(BaseModel):
    user_id: str
    memberships: list[dict[str, Any]] = Field(default_factory=list)


class RoleChangeRequest(BaseModel):
    target_role: str
    new_role: str


def _grant_payload(snapshot: RoleSnapshot) -> dict[str, Any]:
    grant = resolve_access(snapshot)
    return {
        "user_id": snapshot.user_id,
        "team_id": snapshot.team_id,
        "org_role": asdict(describe_org_role(grant.org_role)),
        "team_role": asdict(describe_team_role(grant.team_role)),
        "org": grant.org.model_dump(),
        "team": grant.team.model_dump(),
    }


@router.get("/permissions")
def permissions_for_roles(
    org_role: Optional[str] = Query(None),
    team_role: Optional[str] = Query(None),
    _auth=Depends(require_auth),
):
    snapshot = RoleSnapshot(org_role=normalize_org_role(org_role), team_role=normalize_team_role(team_role))
    return _grant_payload(snapshot)


@router.get("/permissions/me")
def my_permissions(caller: RoleSnapshot = Depends(get_caller)):
    return _grant_payload(caller)


@router.post("/permissions/resolve")
def resolve_from_memberships(body: MembershipLookup, _auth=Depends(require_auth)):
    snapshot = snapshot_from_memberships(body.user_id, body.memberships)
    return _grant_payload(snapshot)


@router.post("/roles/validate-change")
def check_role_change(body: RoleChangeRequest, caller: RoleSnapshot = Depends(get_caller)):
    decision = validate_role_change(caller.team_role, body.target_role, body.new_role)
    return decision.model_dump()
