from __future__ import annotations

from typing import Any

from rangecore.domain.models import (
    ConfigSection,
    DrillTypeDefinition,
    DrillTypeId,
    ParamConstraint as P,
    ParamValue,
)
from rangecore.exceptions import NotFoundError

_ZEROING = DrillTypeDefinition(
    id=DrillTypeId.ZEROING,
    name="Zeroing",
    description="Confirm or adjust rifle zero at distance",
    icon="crosshair",
    color="#10B981",
    params={
        "distance": P(kind="range", min=25, max=300, step=25, unit="m", required=True, default=100),
        "shots": P(kind="options", options=(1, 3, 5), required=True, default=3),
        "position": P(kind="options", options=("prone", "bench", "supported"), default="prone"),
    },
    scoring_model="dispersion",
    input_method="scan",
    config_sections=(
        ConfigSection(id="basic", title="Basic Setup", params=("distance", "shots")),
        ConfigSection(id="position", title="Position", params=("position",)),
    ),
)

_GROUPING = DrillTypeDefinition(
    id=DrillTypeId.GROUPING,
    name="Grouping",
    description="Measure shot group size and precision",
    icon="target",
    color="#3B82F6",
    params={
        "distance": P(kind="range", min=25, max=500, step=25, unit="m", required=True, default=100),
        "shots": P(kind="options", options=(3, 5, 10, 20), required=True, default=5),
        "position": P(
            kind="options",
            options=("prone", "kneeling", "standing", "seated", "supported"),
            default="prone",
        ),
        "target_size": P(kind="options", options=("small", "standard", "large"), default="standard"),
        "strings": P(kind="options", options=(1, 2, 3, 5), default=1),
    },
    scoring_model="dispersion",
    input_method="scan",
    config_sections=(
        ConfigSection(id="basic", title="Basic Setup", params=("distance", "shots", "strings")),
        ConfigSection(id="position", title="Position", params=("position",)),
        ConfigSection(id="target", title="Target", params=("target_size",)),
    ),
)

_TIMED = DrillTypeDefinition(
    id=DrillTypeId.TIMED,
    name="Timed",
    description="Speed drills with time limits or par times",
    icon="clock",
    color="#F59E0B",
    params={
        "distance": P(kind="range", min=3, max=25, step=1, unit="m", required=True, default=7),
        "shots": P(kind="range", min=1, max=30, step=1, required=True, default=6),
        "par_time": P(kind="range", min=1, max=60, unit="s"),
        "time_limit": P(kind="range", min=5, max=300, unit="s"),
        "target_count": P(kind="options", options=(1, 2, 3, 4, 6), default=1),
        "strings": P(kind="options", options=(1, 2, 3, 5, 10), default=1),
    },
    scoring_model="hits_time",
    input_method="manual",
    config_sections=(
        ConfigSection(id="basic", title="Basic Setup", params=("distance", "shots", "strings")),
        ConfigSection(id="timing", title="Timing", params=("par_time", "time_limit")),
        ConfigSection(id="targets", title="Targets", params=("target_count",)),
    ),
)

_QUALIFICATION = DrillTypeDefinition(
    id=DrillTypeId.QUALIFICATION,
    name="Qualification",
    description="Scored qualification or assessment",
    icon="award",
    color="#8B5CF6",
    params={
        "distance": P(kind="range", min=7, max=100, step=1, unit="m", required=True, default=25),
        "shots": P(kind="options", options=(10, 20, 30, 40, 50), required=True, default=20),
        "min_score": P(kind="range", min=50, max=100, step=1, unit="%", required=True, default=80),
        "time_limit": P(kind="range", min=30, max=600, unit="s"),
        "position": P(kind="options", options=("prone", "kneeling", "standing", "mixed")),
        "strings": P(kind="options", options=(1, 2, 3, 4, 5), default=1),
    },
    scoring_model="pass_fail",
    input_method="both",
    config_sections=(
        ConfigSection(id="basic", title="Basic Setup", params=("distance", "shots", "strings")),
        ConfigSection(id="scoring", title="Scoring", params=("min_score",)),
        ConfigSection(id="constraints", title="Constraints", params=("time_limit", "position")),
    ),
)

# Registry order is part of the contract: listings always come back in this order
_DRILL_TYPES: tuple[DrillTypeDefinition, ...] = (_ZEROING, _GROUPING, _TIMED, _QUALIFICATION)
_BY_ID: dict[str, DrillTypeDefinition] = {d.id.value: d for d in _DRILL_TYPES}


def get_drill_type(drill_type_id: Any) -> DrillTypeDefinition:
    key = drill_type_id.value if isinstance(drill_type_id, DrillTypeId) else str(drill_type_id or "").strip().lower()
    definition = _BY_ID.get(key)
    if definition is None:
        raise NotFoundError(f"Unknown drill type: {drill_type_id!r}")
    return definition


def list_drill_types() -> list[DrillTypeDefinition]:
    return list(_DRILL_TYPES)


def default_params(drill_type_id: Any) -> dict[str, ParamValue]:
    return get_drill_type(drill_type_id).defaults


def is_param_required(drill_type_id: Any, param: str) -> bool:
    constraint = get_drill_type(drill_type_id).params.get(param)
    return bool(constraint and constraint.required)
