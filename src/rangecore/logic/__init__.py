from rangecore.logic.drill_library import (
    DrillLibrary,
    duplicate_template,
    get_library,
    get_library_template,
    list_library_templates,
    revise_template,
    templates_grouped_by_type,
)
from rangecore.logic.drill_types import default_params, get_drill_type, is_param_required, list_drill_types
from rangecore.logic.permissions import (
    can_modify_team_role,
    resolve_access,
    resolve_permissions,
    resolve_team_permissions,
    snapshot_from_memberships,
    validate_role_change,
)
from rangecore.logic.validator import editable_params, merge_instance

__all__ = [
    "DrillLibrary",
    "can_modify_team_role",
    "default_params",
    "duplicate_template",
    "editable_params",
    "get_drill_type",
    "get_library",
    "get_library_template",
    "is_param_required",
    "list_drill_types",
    "list_library_templates",
    "merge_instance",
    "resolve_access",
    "resolve_permissions",
    "resolve_team_permissions",
    "revise_template",
    "snapshot_from_memberships",
    "templates_grouped_by_type",
    "validate_role_change",
]
