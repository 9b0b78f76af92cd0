from __future__ import annotations

from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from rangecore.api.deps import ensure_team_access, get_caller, get_template_store, require_auth
from rangecore.data import TemplateStore, instance_to_training_row
from rangecore.domain import DrillTemplate, RoleSnapshot
from rangecore.exceptions import NotFoundError, ValidationError
from rangecore.logic import (
    editable_params,
    get_drill_type,
    get_library_template,
    list_drill_types,
    list_library_templates,
    merge_instance,
)

router = APIRouter(prefix="/v1", tags=["drills"])


class MergeRequest(BaseModel):
    template_id: Optional[str] = None
    template: Optional[DrillTemplate] = None
    overrides: dict[str, Any] = Field(default_factory=dict)
    input_method: Optional[Literal["scan", "manual"]] = None


def drill_type_payload(definition) -> dict[str, Any]:
    payload = definition.model_dump(mode="json")
    payload["required_params"] = definition.required_params
    payload["optional_params"] = definition.optional_params
    payload["defaults"] = definition.defaults
    return payload


def template_payload(template: DrillTemplate) -> dict[str, Any]:
    payload = template.model_dump(mode="json")
    payload["defaults"] = template.defaults
    payload["locked_params"] = template.locked_params
    payload["editable_params"] = editable_params(template)
    return payload


@router.get("/drill-types")
def drill_types(_auth=Depends(require_auth)):
    return {"rows": [drill_type_payload(d) for d in list_drill_types()]}


@router.get("/drill-types/{drill_type_id}")
def drill_type(drill_type_id: str, _auth=Depends(require_auth)):
    return drill_type_payload(get_drill_type(drill_type_id))


@router.get("/library")
def library(drill_type: Optional[str] = Query(None), _auth=Depends(require_auth)):
    return {"rows": [template_payload(t) for t in list_library_templates(drill_type)]}


@router.get("/library/{template_id}")
def library_template(template_id: str, _auth=Depends(require_auth)):
    return template_payload(get_library_template(template_id))


def _stored_template(store: TemplateStore, template_id: str, caller: RoleSnapshot) -> DrillTemplate:
    template = store.get(template_id)
    if template.team_id:
        ensure_team_access(caller, template.team_id, org_flag="can_create_training", team_flag="can_view_team_details")
    elif not caller.user_id or template.created_by != caller.user_id:
        # Personal templates are visible to their owner only
        raise NotFoundError(f"Unknown template: {template_id!r}")
    return template


def _resolve_template(body: MergeRequest, store: TemplateStore, caller: RoleSnapshot) -> DrillTemplate:
    if body.template is not None:
        return body.template
    if not body.template_id:
        raise ValidationError("template_id or template is required", param="template_id")
    try:
        return get_library_template(body.template_id)
    except NotFoundError:
        return _stored_template(store, body.template_id, caller)


@router.post("/drills/merge")
def merge_drill(
    body: MergeRequest,
    store: TemplateStore = Depends(get_template_store),
    caller: RoleSnapshot = Depends(get_caller),
):
    template = _resolve_template(body, store, caller)
    instance = merge_instance(template, body.overrides)
    return {
        "instance": instance.model_dump(mode="json"),
        "training_row": instance_to_training_row(template, instance, body.input_method),
    }
