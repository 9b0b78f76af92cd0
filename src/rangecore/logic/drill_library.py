from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence
from uuid import uuid4

import yaml
from pydantic import ValidationError as PydanticValidationError

from rangecore.config import settings
from rangecore.domain.models import DrillTemplate, DrillTypeId, ParamConstraint, ParamValue
from rangecore.exceptions import ConfigError, NotFoundError, ValidationError
from rangecore.logic.drill_types import get_drill_type, list_drill_types
from rangecore.logic.validator import check_param

logger = logging.getLogger(__name__)


def build_params(
    drill_type: Any,
    defaults: Optional[Mapping[str, ParamValue]] = None,
    locked: Iterable[str] = (),
    allowed_distances: Optional[Sequence[int | float]] = None,
) -> dict[str, ParamConstraint]:
    """
    Derive a template schema from its drill type.
    Template defaults replace the type defaults, `locked` pins parameters for
    instances, and `allowed_distances` narrows distance to a fixed set.
    """
    definition = get_drill_type(drill_type)
    defaults = defaults or {}
    locked = set(locked)

    unknown = (set(defaults) | locked) - set(definition.params)
    if unknown:
        raise ValidationError(
            f"Unknown parameters for {definition.id.value}: {', '.join(sorted(unknown))}",
            param=sorted(unknown)[0],
        )

    params: dict[str, ParamConstraint] = {}
    for name, base in definition.params.items():
        fields = base.model_dump()
        if name in defaults:
            fields["default"] = defaults[name]
        fields["locked"] = name in locked
        if name == "distance" and allowed_distances:
            fields.update(kind="options", options=tuple(allowed_distances), min=None, max=None, step=None)
        try:
            params[name] = ParamConstraint(**fields)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid default for {name}: {exc.errors()[0]['msg']}", param=name) from exc
    return params


def _template(
    template_id: str,
    drill_type: DrillTypeId,
    name: str,
    description: str,
    goal: str,
    difficulty: str,
    tags: Sequence[str],
    defaults: Mapping[str, ParamValue],
    locked: Sequence[str] = (),
    allowed_distances: Optional[Sequence[int]] = None,
) -> DrillTemplate:
    return DrillTemplate(
        id=template_id,
        drill_type=drill_type,
        name=name,
        source="library",
        description=description,
        goal=goal,
        difficulty=difficulty,
        tags=tuple(tags),
        params=build_params(drill_type, defaults, locked, allowed_distances),
    )


def _builtin_templates() -> tuple[DrillTemplate, ...]:
    Z, G, T, Q = DrillTypeId.ZEROING, DrillTypeId.GROUPING, DrillTypeId.TIMED, DrillTypeId.QUALIFICATION
    return (
        _template(
            "lib_zeroing_100m", Z, "100m Zero Check",
            "Standard 3-shot zero confirmation at 100 meters. Use to verify zero before training.",
            "Confirm rifle zero is accurate", "beginner", ["zero", "confirmation", "precision"],
            {"distance": 100, "shots": 3, "position": "prone"},
            locked=["shots"],
        ),
        _template(
            "lib_zeroing_cold_bore", Z, "Cold Bore",
            "Single shot from a cold barrel. Tests first-round accuracy and shooter readiness.",
            "Verify cold bore point of impact", "intermediate", ["cold bore", "precision", "first shot"],
            {"distance": 100, "shots": 1, "position": "prone"},
            locked=["shots"], allowed_distances=[50, 100, 200, 300],
        ),
        _template(
            "lib_grouping_5shot", G, "5-Shot Group",
            "Standard 5-shot group to measure rifle/shooter precision.",
            "Measure baseline precision", "beginner", ["precision", "baseline", "standard"],
            {"distance": 100, "shots": 5, "position": "prone", "target_size": "standard", "strings": 1},
            locked=["shots"],
        ),
        _template(
            "lib_grouping_10shot", G, "10-Shot Group",
            "Extended 10-shot group for more statistically significant precision data.",
            "Detailed precision analysis", "intermediate", ["precision", "extended", "analysis"],
            {"distance": 100, "shots": 10, "position": "prone", "target_size": "standard", "strings": 1},
            locked=["shots"],
        ),
        _template(
            "lib_grouping_positional", G, "3-Position Groups",
            "Shoot groups from prone, kneeling, and standing. Tests positional consistency.",
            "Compare precision across positions", "advanced", ["positional", "comparison", "multi-position"],
            {"distance": 100, "shots": 5, "position": "prone", "target_size": "standard", "strings": 3},
            locked=["shots", "strings"],
        ),
        _template(
            "lib_timed_bill", T, "Bill Drill",
            "Classic speed drill: 6 shots on 1 target as fast as possible. Par time 2 seconds.",
            "Develop rapid target engagement", "intermediate", ["speed", "classic", "bill drill"],
            {"distance": 7, "shots": 6, "par_time": 2, "time_limit": None, "target_count": 1, "strings": 1},
            locked=["shots", "target_count"], allowed_distances=[5, 7, 10],
        ),
        _template(
            "lib_timed_presidente", T, "El Presidente",
            "Start facing away. Turn, engage 3 targets with 2 shots each, reload, repeat.",
            "Master transitions and reloads under time", "advanced", ["competition", "transitions", "reload"],
            {"distance": 10, "shots": 12, "par_time": 10, "time_limit": None, "target_count": 3, "strings": 2},
            locked=["shots", "target_count", "strings"],
        ),
        _template(
            "lib_timed_failure", T, "Failure Drill",
            "Mozambique drill: 2 shots to body, 1 to head. Tests shot placement under speed.",
            "Accurate shot placement under time pressure", "intermediate",
            ["mozambique", "failure drill", "headshot"],
            {"distance": 7, "shots": 3, "par_time": 2, "time_limit": None, "target_count": 1, "strings": 1},
            locked=["shots", "target_count"], allowed_distances=[3, 5, 7, 10],
        ),
        _template(
            "lib_timed_par", T, "Par Time Challenge",
            "Configurable par time drill. Set your own shots and par time.",
            "Beat your par time consistently", "beginner", ["par time", "configurable", "practice"],
            {"distance": 7, "shots": 5, "par_time": 3, "time_limit": None, "target_count": 1, "strings": 5},
        ),
        _template(
            "lib_qual_basic", Q, "Basic Marksmanship Qual",
            "Standard 20-round qualification. 80% minimum to pass. No time limit.",
            "Verify basic marksmanship proficiency", "beginner", ["qualification", "basic", "marksmanship"],
            {"distance": 25, "shots": 20, "min_score": 80, "time_limit": None, "position": None, "strings": 1},
            locked=["shots", "min_score"],
        ),
        _template(
            "lib_qual_timed", Q, "Timed Qualification",
            "30-round timed qualification. 80% in 5 minutes. Tests speed and accuracy.",
            "Qualify under time pressure", "intermediate", ["qualification", "timed", "speed"],
            {"distance": 25, "shots": 30, "min_score": 80, "time_limit": 300, "position": None, "strings": 1},
            locked=["shots", "min_score", "time_limit"],
        ),
        _template(
            "lib_qual_advanced", Q, "Advanced Qualification",
            "40-round multi-stage qualification. Multiple distances and positions. 85% to pass.",
            "Demonstrate advanced marksmanship", "advanced", ["qualification", "advanced", "multi-stage"],
            {"distance": 50, "shots": 40, "min_score": 85, "time_limit": 600, "position": "mixed", "strings": 4},
            locked=["shots", "min_score", "strings"], allowed_distances=[25, 50, 100],
        ),
    )


def load_extra_templates(path: Path) -> tuple[DrillTemplate, ...]:
    """
    Read additional library templates from YAML.

    The file holds a `templates` list; each entry names `id`, `drill_type`,
    `name` and optionally `description`, `goal`, `difficulty`, `tags`,
    `defaults`, `locked_params` and `allowed_distances`.
    """
    try:
        payload = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read drill templates from {path}: {exc}") from exc

    entries = payload.get("templates", []) if isinstance(payload, dict) else []
    if not isinstance(entries, list):
        raise ConfigError(f"'templates' in {path} must be a list")

    templates: list[DrillTemplate] = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(f"Template #{idx} in {path} must be a mapping")
        try:
            drill_type = get_drill_type(entry.get("drill_type")).id
            templates.append(
                _template(
                    str(entry["id"]),
                    drill_type,
                    str(entry["name"]),
                    str(entry.get("description") or ""),
                    str(entry.get("goal") or ""),
                    str(entry.get("difficulty") or "beginner"),
                    [str(t) for t in entry.get("tags") or []],
                    entry.get("defaults") or {},
                    locked=entry.get("locked_params") or [],
                    allowed_distances=entry.get("allowed_distances"),
                )
            )
        except (KeyError, NotFoundError, ValidationError, PydanticValidationError) as exc:
            raise ConfigError(f"Template #{idx} in {path} is invalid: {exc}") from exc
    return tuple(templates)


class DrillLibrary:
    """
    Read-only catalog of curated drill templates.
    Teams duplicate entries to get editable copies.
    """

    def __init__(self, templates: Iterable[DrillTemplate]):
        self._templates: tuple[DrillTemplate, ...] = tuple(templates)
        ids = [t.id for t in self._templates]
        if len(ids) != len(set(ids)):
            raise ConfigError("Duplicate template ids in drill library")

    def list(self, drill_type: Any = None) -> list[DrillTemplate]:
        if drill_type is None:
            return list(self._templates)
        type_id = get_drill_type(drill_type).id
        return [t for t in self._templates if t.drill_type == type_id]

    def get(self, template_id: str) -> DrillTemplate:
        for template in self._templates:
            if template.id == template_id:
                return template
        raise NotFoundError(f"Unknown library template: {template_id!r}")

    def grouped_by_type(self) -> dict[str, list[DrillTemplate]]:
        return {d.id.value: self.list(d.id) for d in list_drill_types()}


@lru_cache(maxsize=1)
def get_library() -> DrillLibrary:
    templates = list(_builtin_templates())
    extra_path = settings.drills.extra_templates_path
    if extra_path:
        extra = load_extra_templates(extra_path)
        logger.info(f"Loaded {len(extra)} extra drill templates from {extra_path}")
        templates.extend(extra)
    return DrillLibrary(templates)


def list_library_templates(drill_type: Any = None) -> list[DrillTemplate]:
    return get_library().list(drill_type)


def get_library_template(template_id: str) -> DrillTemplate:
    return get_library().get(template_id)


def templates_grouped_by_type() -> dict[str, list[DrillTemplate]]:
    return get_library().grouped_by_type()


def duplicate_template(
    template: DrillTemplate,
    *,
    name: Optional[str] = None,
    source: str = "team",
    team_id: Optional[str] = None,
    created_by: Optional[str] = None,
) -> DrillTemplate:
    """
    Copy a template into a team or personal collection.
    The copy keeps the defaults but drops library locks and distance restrictions.
    """
    if source not in ("team", "personal"):
        raise ValidationError(f"Cannot duplicate into source {source!r}", param="source")
    if source == "team" and not team_id:
        raise ValidationError("team_id is required for team templates", param="team_id")

    return DrillTemplate(
        id=uuid4().hex,
        drill_type=template.drill_type,
        name=(name or "").strip() or template.name,
        source=source,
        team_id=team_id if source == "team" else None,
        created_by=created_by,
        description=template.description,
        goal=template.goal,
        difficulty=template.difficulty,
        tags=template.tags,
        params=build_params(template.drill_type, template.defaults),
    )


def revise_template(
    template: DrillTemplate,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    goal: Optional[str] = None,
    defaults: Optional[Mapping[str, Any]] = None,
    locked_params: Optional[Iterable[str]] = None,
) -> DrillTemplate:
    """
    Apply owner edits to a team or personal template.
    New defaults go through the same checks as instance overrides, locks aside.
    """
    if template.is_read_only:
        raise ValidationError(f"Library template {template.id!r} is read-only; duplicate it first")

    defaults = dict(defaults or {})
    unknown = set(defaults) - set(template.params)
    if unknown:
        raise ValidationError(f"Unknown parameters: {', '.join(sorted(unknown))}", param=sorted(unknown)[0])

    merged = template.defaults
    errors: list[str] = []
    for key, value in defaults.items():
        try:
            merged[key] = check_param(key, template.params[key], value)
        except ValidationError as exc:
            errors.append(str(exc))
    if errors:
        raise ValidationError("; ".join(errors), errors=errors)

    locked = template.locked_params if locked_params is None else list(locked_params)
    unknown_locks = set(locked) - set(template.params)
    if unknown_locks:
        raise ValidationError(f"Unknown parameters: {', '.join(sorted(unknown_locks))}", param=sorted(unknown_locks)[0])

    params = {}
    for key, constraint in template.params.items():
        fields = constraint.model_dump()
        fields["default"] = merged[key]
        fields["locked"] = key in locked
        params[key] = ParamConstraint(**fields)

    clean_name = (name or "").strip()
    return template.model_copy(
        update={
            "name": clean_name or template.name,
            "description": template.description if description is None else description,
            "goal": template.goal if goal is None else goal,
            "params": params,
        }
    )
