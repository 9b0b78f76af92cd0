from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from rangecore.domain.models import DrillInstanceConfig, DrillTemplate, ParamConstraint, ParamValue
from rangecore.exceptions import ValidationError


def _as_number(value: Any) -> Optional[float]:
    """Finite float for ints, floats and numeric strings; None otherwise."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _tidy(number: float) -> int | float:
    return int(number) if number.is_integer() else number


def _check_range(name: str, constraint: ParamConstraint, value: Any) -> int | float:
    number = _as_number(value)
    if number is None:
        raise ValidationError(f"{name} must be numeric, got {value!r}", param=name)

    # Out-of-range values are clamped, not rejected; the top clamps to the last grid point
    if constraint.min is not None and number < constraint.min:
        number = constraint.min
    upper = constraint.grid_max()
    if upper is not None and number > upper:
        number = upper

    if not constraint.on_grid(number):
        raise ValidationError(
            f"{name} must be a multiple of {_tidy(constraint.step)} from {_tidy(constraint.grid_base)}, "
            f"got {_tidy(number)}",
            param=name,
        )
    return _tidy(number)


def _check_option(name: str, constraint: ParamConstraint, value: Any) -> ParamValue:
    options = constraint.options or ()
    if not isinstance(value, bool):
        if value in options:
            return value
        number = _as_number(value)
        if number is not None:
            for option in options:
                if not isinstance(option, str) and float(option) == number:
                    return option
    allowed = ", ".join(str(o) for o in options)
    raise ValidationError(f"{name} must be one of: {allowed}", param=name)


def check_param(name: str, constraint: ParamConstraint, value: Any) -> ParamValue:
    """
    Validate one proposed value against a non-locked constraint and return the
    value to store. Range values are clamped into bounds.
    """
    if value is None:
        if constraint.required:
            raise ValidationError(f"{name} is required", param=name)
        return None
    if constraint.kind == "options":
        return _check_option(name, constraint, value)
    return _check_range(name, constraint, value)


def editable_params(template: DrillTemplate) -> list[str]:
    return [name for name, c in template.params.items() if not c.locked]


def merge_instance(template: DrillTemplate, overrides: Optional[Mapping[str, Any]] = None) -> DrillInstanceConfig:
    """
    Merge template defaults with caller overrides into a complete instance config.

    Overrides of locked parameters are dropped and the template default kept.
    Keys outside the template schema are ignored. All invalid values are
    reported together in one ValidationError.
    """
    overrides = overrides or {}
    values: dict[str, ParamValue] = {}
    errors: list[str] = []
    failed: list[str] = []

    for name, constraint in template.params.items():
        if constraint.locked or name not in overrides:
            values[name] = constraint.default
            continue
        try:
            values[name] = check_param(name, constraint, overrides[name])
        except ValidationError as exc:
            errors.append(str(exc))
            failed.append(name)

    if errors:
        raise ValidationError(
            "; ".join(errors),
            param=failed[0] if len(failed) == 1 else None,
            errors=errors,
        )

    return DrillInstanceConfig(template_id=template.id, drill_type=template.drill_type, values=values)
