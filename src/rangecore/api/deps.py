from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException

from rangecore.config import settings
from rangecore.data import Database, TemplateStore
from rangecore.domain import AccessGrant, RoleSnapshot, normalize_org_role, normalize_team_role
from rangecore.logic import resolve_access

# Global/Cached instances
_db_instance: Optional[Database] = None
_store_instance: Optional[TemplateStore] = None


def get_db() -> Database:
    global _db_instance
    if _db_instance is None:
        _db_instance = Database(settings.storage.db_path)
    return _db_instance


def get_template_store() -> TemplateStore:
    global _store_instance
    db = get_db()
    if _store_instance is None or _store_instance.db is not db:
        _store_instance = TemplateStore(db=db)
    return _store_instance


def require_auth(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
):
    token = settings.security.api_token
    if not token:
        return

    if (
        authorization == f"Bearer {token}"
        or authorization == f"Token {token}"
        or x_api_key == token
    ):
        return

    raise HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Bearer"})


def get_caller(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_org_role: Optional[str] = Header(None, alias="X-Org-Role"),
    x_team_role: Optional[str] = Header(None, alias="X-Team-Role"),
    x_team_id: Optional[str] = Header(None, alias="X-Team-Id"),
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> RoleSnapshot:
    """
    Caller roles as forwarded by the identity provider gateway.
    Role headers are normalized here; unknown spellings carry no privilege.
    """
    require_auth(authorization=authorization, x_api_key=x_api_key)
    return RoleSnapshot(
        user_id=(x_user_id or "").strip() or None,
        org_role=normalize_org_role(x_org_role),
        team_role=normalize_team_role(x_team_role),
        team_id=(x_team_id or "").strip() or None,
    )


def ensure_team_access(caller: RoleSnapshot, team_id: str, *, org_flag: str, team_flag: str) -> AccessGrant:
    """
    Allow when the organization role grants `org_flag`, or the caller belongs to
    `team_id` with a team role granting `team_flag`.
    """
    grant = resolve_access(caller)
    if getattr(grant.org, org_flag):
        return grant
    if caller.team_id == team_id and getattr(grant.team, team_flag):
        return grant
    raise HTTPException(status_code=403, detail="Access denied for requested team")
