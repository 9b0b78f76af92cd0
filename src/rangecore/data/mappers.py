from __future__ import annotations

from typing import Any, Mapping, Optional

from rangecore.domain.models import DrillInstanceConfig, DrillTemplate, DrillTypeId
from rangecore.exceptions import ValidationError
from rangecore.logic.drill_library import build_params
from rangecore.logic.drill_types import get_drill_type

# Backend columns of a training drill row, keyed by instance parameter
_ROW_COLUMNS = {
    "distance": "distance_m",
    "shots": "rounds_per_shooter",
    "time_limit": "time_limit_seconds",
    "strings": "strings_count",
}


def drill_goal_for(drill_type: DrillTypeId) -> str:
    return "grouping" if drill_type in (DrillTypeId.ZEROING, DrillTypeId.GROUPING) else "achievement"


def target_type_for(drill_type: DrillTypeId) -> str:
    return "tactical" if drill_type == DrillTypeId.TIMED else "paper"


def instance_to_training_row(
    template: DrillTemplate,
    instance: DrillInstanceConfig,
    input_method: Optional[str] = None,
) -> dict[str, Any]:
    """
    Shape a merged instance as a training-drill row for the hosted backend.
    Grouping drills are always scanned; other drills default to manual entry.
    """
    if instance.template_id != template.id:
        raise ValidationError(
            f"Instance was merged from {instance.template_id!r}, not {template.id!r}",
            param="template_id",
        )

    goal = drill_goal_for(template.drill_type)
    if goal == "grouping":
        method = "scan"
    elif input_method in ("scan", "manual"):
        method = input_method
    else:
        method = "manual"

    row: dict[str, Any] = {
        "drill_id": template.id,
        "name": template.name,
        "description": template.description or None,
        "drill_type": template.drill_type.value,
        "drill_goal": goal,
        "target_type": target_type_for(template.drill_type),
        "input_method": method,
    }
    for param, column in _ROW_COLUMNS.items():
        row[column] = instance.values.get(param)
    row["strings_count"] = row["strings_count"] or 1
    row["params_json"] = dict(instance.values)
    return row


def _infer_drill_type(row: Mapping[str, Any]) -> DrillTypeId:
    explicit = row.get("drill_type")
    if explicit:
        return get_drill_type(explicit).id
    if row.get("drill_goal") == "grouping":
        return DrillTypeId.GROUPING
    if row.get("target_type") == "tactical":
        return DrillTypeId.TIMED
    return DrillTypeId.QUALIFICATION


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def template_from_row(row: Mapping[str, Any]) -> DrillTemplate:
    """
    Build an editable template from a backend `drill_templates` row.
    Rows whose values do not fit the drill type schema raise ValidationError.
    """
    if not row.get("id"):
        raise ValidationError("Template row has no id", param="id")

    drill_type = _infer_drill_type(row)
    definition = get_drill_type(drill_type)
    defaults: dict[str, Any] = {}
    for param, column in _ROW_COLUMNS.items():
        if param not in definition.params:
            continue
        value = _first(row, column, f"default_{column}")
        if value is not None:
            defaults[param] = value

    return DrillTemplate(
        id=str(row["id"]),
        drill_type=drill_type,
        name=str(row.get("name") or definition.name),
        source="team" if row.get("team_id") else "personal",
        team_id=str(row["team_id"]) if row.get("team_id") else None,
        created_by=row.get("created_by"),
        description=str(row.get("description") or ""),
        goal=str(row.get("goal") or ""),
        params=build_params(drill_type, defaults),
    )
