from __future__ import annotations

import math
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rangecore.domain.roles import OrgRole, TeamRole

ParamValue = Union[int, float, str, None]

# Tolerance for step-grid checks on float parameters (e.g. 0.5s par times)
STEP_EPSILON = 1e-9


class DrillTypeId(str, Enum):
    ZEROING = "zeroing"
    GROUPING = "grouping"
    TIMED = "timed"
    QUALIFICATION = "qualification"


ScoringModel = Literal["dispersion", "hits", "hits_time", "score", "pass_fail"]
InputMethod = Literal["scan", "manual", "both"]
TemplateSource = Literal["library", "team", "personal"]
Difficulty = Literal["beginner", "intermediate", "advanced"]


class PermissionSet(BaseModel):
    """Organization-scope capabilities. Derived from a role on every access, never stored."""

    model_config = ConfigDict(frozen=True)

    can_manage_org: bool = False
    can_invite_members: bool = False
    can_manage_members: bool = False
    can_create_training: bool = False
    can_delete_training: bool = False
    can_view_all_analytics: bool = False
    can_export_analytics: bool = False


class TeamPermissionSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_manage_team: bool = False
    can_view_team_details: bool = False
    can_invite_to_team: bool = False
    can_remove_from_team: bool = False
    can_update_team_member_roles: bool = False
    can_manage_squads: bool = False
    can_manage_own_squad: bool = False
    can_view_all_squads: bool = False
    can_create_team_training: bool = False
    can_add_sessions_to_team: bool = False
    can_view_team_progress: bool = False
    can_view_own_progress: bool = False


class RoleSnapshot(BaseModel):
    """
    Read-only view of the caller's roles, handed to the resolver at call time.
    Roles are already normalized; see rangecore.domain.normalize.
    """

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    org_role: Optional[OrgRole] = None
    team_role: Optional[TeamRole] = None
    team_id: Optional[str] = None


class AccessGrant(BaseModel):
    model_config = ConfigDict(frozen=True)

    org_role: Optional[OrgRole] = None
    team_role: Optional[TeamRole] = None
    org: PermissionSet = Field(default_factory=PermissionSet)
    team: TeamPermissionSet = Field(default_factory=TeamPermissionSet)


class RoleChangeDecision(BaseModel):
    valid: bool
    reason: Optional[str] = None


class ParamConstraint(BaseModel):
    """
    Edit rules for one drill parameter.
    `range` parameters are numeric and bounded by min/max on a `step` grid,
    `options` parameters take one of a fixed set of values.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["range", "options"] = "range"
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: Optional[tuple[Union[int, float, str], ...]] = None
    unit: Optional[str] = None
    locked: bool = False
    required: bool = False
    default: ParamValue = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "ParamConstraint":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min {self.min} is greater than max {self.max}")
        if self.step is not None and self.step <= 0:
            raise ValueError("step must be positive")
        if self.required and self.default is None:
            raise ValueError("required parameter needs a default")
        if self.kind == "options":
            if not self.options:
                raise ValueError("options constraint needs at least one option")
            if self.default is not None and self.default not in self.options:
                raise ValueError(f"default {self.default!r} is not one of {list(self.options)}")
            return self
        if self.default is None:
            return self
        if isinstance(self.default, str):
            raise ValueError("range constraint default must be numeric")
        if self.min is not None and self.default < self.min:
            raise ValueError(f"default {self.default} is below min {self.min}")
        if self.max is not None and self.default > self.max:
            raise ValueError(f"default {self.default} is above max {self.max}")
        if not self.on_grid(self.default):
            raise ValueError(f"default {self.default} is not a multiple of {self.step} from {self.grid_base}")
        return self

    @property
    def grid_base(self) -> float:
        return self.min if self.min is not None else 0.0

    def on_grid(self, number: float) -> bool:
        if not self.step:
            return True
        steps = (number - self.grid_base) / self.step
        return abs(steps - round(steps)) <= STEP_EPSILON

    def grid_max(self) -> Optional[float]:
        """Largest value on the step grid that does not exceed `max`."""
        if self.max is None or not self.step:
            return self.max
        steps = math.floor((self.max - self.grid_base) / self.step + STEP_EPSILON)
        return self.grid_base + steps * self.step


class ConfigSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    params: tuple[str, ...]


class DrillTypeDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: DrillTypeId
    name: str
    description: str
    icon: str
    color: str
    params: dict[str, ParamConstraint]
    scoring_model: ScoringModel
    input_method: InputMethod
    config_sections: tuple[ConfigSection, ...] = ()

    @property
    def required_params(self) -> list[str]:
        return [name for name, c in self.params.items() if c.required]

    @property
    def optional_params(self) -> list[str]:
        return [name for name, c in self.params.items() if not c.required]

    @property
    def defaults(self) -> dict[str, ParamValue]:
        return {name: c.default for name, c in self.params.items()}


class DrillTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    drill_type: DrillTypeId
    name: str
    source: TemplateSource = "library"
    team_id: Optional[str] = None
    created_by: Optional[str] = None
    description: str = ""
    goal: str = ""
    difficulty: Difficulty = "beginner"
    tags: tuple[str, ...] = ()
    params: dict[str, ParamConstraint]

    @property
    def defaults(self) -> dict[str, ParamValue]:
        return {name: c.default for name, c in self.params.items()}

    @property
    def locked_params(self) -> list[str]:
        return [name for name, c in self.params.items() if c.locked]

    @property
    def is_read_only(self) -> bool:
        return self.source == "library"


class DrillInstanceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    template_id: str
    drill_type: DrillTypeId
    values: dict[str, ParamValue]
