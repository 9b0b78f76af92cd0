from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from rangecore.api.deps import ensure_team_access, get_caller, get_template_store
from rangecore.api.routers.drills import template_payload
from rangecore.data import TemplateStore
from rangecore.domain import RoleSnapshot
from rangecore.exceptions import NotFoundError
from rangecore.logic import duplicate_template, get_library_template, revise_template

logger = logging.getLogger("rangecore.api.templates")
router = APIRouter(prefix="/v1/teams/{team_id}/templates", tags=["templates"])


class DuplicateRequest(BaseModel):
    library_template_id: str
    name: Optional[str] = None


class ReviseRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    goal: Optional[str] = None
    defaults: dict[str, Any] = Field(default_factory=dict)
    locked_params: Optional[list[str]] = None


def _team_template(store: TemplateStore, team_id: str, template_id: str):
    template = store.get(template_id)
    if template.team_id != team_id:
        raise NotFoundError(f"Unknown template: {template_id!r}")
    return template


@router.get("")
def list_team_templates(
    team_id: str,
    store: TemplateStore = Depends(get_template_store),
    caller: RoleSnapshot = Depends(get_caller),
):
    ensure_team_access(caller, team_id, org_flag="can_create_training", team_flag="can_view_team_details")
    return {"rows": [template_payload(t) for t in store.list_for_team(team_id)]}


@router.post("", status_code=201)
def create_team_template(
    team_id: str,
    body: DuplicateRequest,
    store: TemplateStore = Depends(get_template_store),
    caller: RoleSnapshot = Depends(get_caller),
):
    ensure_team_access(caller, team_id, org_flag="can_create_training", team_flag="can_create_team_training")
    source = get_library_template(body.library_template_id)
    copy = duplicate_template(source, name=body.name, source="team", team_id=team_id, created_by=caller.user_id)
    store.save(copy)
    logger.info(f"Duplicated {source.id} into team {team_id} as {copy.id}")
    return template_payload(copy)


@router.get("/{template_id}")
def get_team_template(
    team_id: str,
    template_id: str,
    store: TemplateStore = Depends(get_template_store),
    caller: RoleSnapshot = Depends(get_caller),
):
    ensure_team_access(caller, team_id, org_flag="can_create_training", team_flag="can_view_team_details")
    return template_payload(_team_template(store, team_id, template_id))


@router.patch("/{template_id}")
def update_team_template(
    team_id: str,
    template_id: str,
    body: ReviseRequest,
    store: TemplateStore = Depends(get_template_store),
    caller: RoleSnapshot = Depends(get_caller),
):
    ensure_team_access(caller, team_id, org_flag="can_create_training", team_flag="can_create_team_training")
    current = _team_template(store, team_id, template_id)
    revised = revise_template(
        current,
        name=body.name,
        description=body.description,
        goal=body.goal,
        defaults=body.defaults,
        locked_params=body.locked_params,
    )
    store.save(revised)
    return template_payload(revised)


@router.delete("/{template_id}", status_code=204)
def delete_team_template(
    team_id: str,
    template_id: str,
    store: TemplateStore = Depends(get_template_store),
    caller: RoleSnapshot = Depends(get_caller),
):
    ensure_team_access(caller, team_id, org_flag="can_delete_training", team_flag="can_create_team_training")
    store.delete(template_id, team_id=team_id)
    logger.info(f"Deleted template {template_id} from team {team_id}")
    return None
