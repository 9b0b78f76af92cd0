import math

import pytest

from rangecore.domain import DrillTemplate, DrillTypeId, ParamConstraint
from rangecore.exceptions import ValidationError
from rangecore.logic import editable_params, merge_instance
from rangecore.logic.validator import check_param


def test_locked_shots_ignore_override(grouping_template):
    instance = merge_instance(grouping_template, {"distance": 150, "shots": 10})
    assert instance.values == {"distance": 150, "shots": 5}
    assert instance.template_id == "tpl_5shot"
    assert instance.drill_type is DrillTypeId.GROUPING


def test_no_overrides_gives_defaults(grouping_template):
    assert merge_instance(grouping_template).values == grouping_template.defaults
    assert merge_instance(grouping_template, {}).values == {"distance": 100, "shots": 5}


def test_merge_is_idempotent(grouping_template):
    overrides = {"distance": 200}
    first = merge_instance(grouping_template, overrides)
    second = merge_instance(grouping_template, overrides)
    assert first == second

    again = merge_instance(grouping_template, first.values)
    assert again == first


def test_locked_values_always_come_from_template(grouping_template):
    for shots in (1, 5, 99, "ten", None):
        instance = merge_instance(grouping_template, {"shots": shots})
        assert instance.values["shots"] == 5


def test_clamps_into_range():
    template = DrillTemplate(
        id="tpl_clamp",
        drill_type=DrillTypeId.TIMED,
        name="Clamp",
        source="personal",
        params={"par_time": ParamConstraint(min=0, max=10, default=2)},
    )
    assert merge_instance(template, {"par_time": -5}).values["par_time"] == 0
    assert merge_instance(template, {"par_time": 50}).values["par_time"] == 10


def test_clamps_above_max(grouping_template):
    assert merge_instance(grouping_template, {"distance": 1000}).values["distance"] == 300


def test_unknown_keys_are_ignored(grouping_template):
    instance = merge_instance(grouping_template, {"distance": 150, "wind": "strong"})
    assert "wind" not in instance.values


def test_numeric_strings_are_accepted(grouping_template):
    assert merge_instance(grouping_template, {"distance": "175"}).values["distance"] == 175


@pytest.mark.parametrize("bad", ["far", True, math.nan, math.inf, [100]])
def test_non_numeric_range_value_rejected(grouping_template, bad):
    with pytest.raises(ValidationError) as exc:
        merge_instance(grouping_template, {"distance": bad})
    assert exc.value.param == "distance"


def test_step_grid_is_enforced():
    constraint = ParamConstraint(min=25, max=300, step=25, default=100)
    assert check_param("distance", constraint, 150) == 150
    assert check_param("distance", constraint, 150.0) == 150
    with pytest.raises(ValidationError, match="multiple of 25"):
        check_param("distance", constraint, 110)


def test_clamped_value_lands_on_grid():
    constraint = ParamConstraint(min=25, max=300, step=25)
    assert check_param("distance", constraint, 10) == 25
    assert check_param("distance", constraint, 9000) == 300


def test_fractional_step():
    constraint = ParamConstraint(min=0.5, max=5, step=0.5)
    assert check_param("par_time", constraint, 1.5) == 1.5
    assert check_param("par_time", constraint, 2) == 2
    with pytest.raises(ValidationError):
        check_param("par_time", constraint, 1.2)


def test_options_membership():
    constraint = ParamConstraint(kind="options", options=(3, 5, 10), default=5)
    assert check_param("shots", constraint, 10) == 10
    assert check_param("shots", constraint, "10") == 10
    assert check_param("shots", constraint, 5.0) == 5
    with pytest.raises(ValidationError, match="one of: 3, 5, 10"):
        check_param("shots", constraint, 7)
    with pytest.raises(ValidationError):
        check_param("shots", constraint, True)


def test_string_options():
    constraint = ParamConstraint(kind="options", options=("prone", "standing"))
    assert check_param("position", constraint, "standing") == "standing"
    with pytest.raises(ValidationError):
        check_param("position", constraint, "upside_down")


def test_none_clears_optional_and_rejects_required():
    optional = ParamConstraint(min=1, max=60)
    required = ParamConstraint(min=1, max=60, required=True, default=5)
    assert check_param("par_time", optional, None) is None
    with pytest.raises(ValidationError, match="required"):
        check_param("distance", required, None)


def test_all_errors_reported_together():
    template = DrillTemplate(
        id="tpl_multi",
        drill_type=DrillTypeId.GROUPING,
        name="Multi",
        source="team",
        team_id="t1",
        params={
            "distance": ParamConstraint(min=25, max=300, step=25, default=100),
            "shots": ParamConstraint(kind="options", options=(5, 10), default=5),
            "position": ParamConstraint(kind="options", options=("prone",), default="prone"),
        },
    )
    with pytest.raises(ValidationError) as exc:
        merge_instance(template, {"distance": 110, "shots": 7, "position": "prone"})
    assert len(exc.value.errors) == 2
    assert exc.value.param is None

    with pytest.raises(ValidationError) as single:
        merge_instance(template, {"shots": 7})
    assert single.value.param == "shots"
    assert single.value.errors == [str(single.value)]


def test_template_is_not_mutated(grouping_template):
    before = grouping_template.model_dump()
    merge_instance(grouping_template, {"distance": 250, "shots": 20})
    assert grouping_template.model_dump() == before


def test_editable_params(grouping_template):
    assert editable_params(grouping_template) == ["distance"]
    assert grouping_template.locked_params == ["shots"]


def test_constraint_rejects_bad_bounds():
    with pytest.raises(ValueError):
        ParamConstraint(min=10, max=5)
    with pytest.raises(ValueError):
        ParamConstraint(kind="options", options=())
    with pytest.raises(ValueError):
        ParamConstraint(min=0, max=10, default=20)
    with pytest.raises(ValueError):
        ParamConstraint(kind="options", options=(1, 2), default=3)


def test_default_must_sit_on_step_grid():
    with pytest.raises(ValueError, match="multiple of"):
        ParamConstraint(min=25, max=300, step=25, default=110)
    assert ParamConstraint(min=25, max=300, step=25, default=125).default == 125


def test_required_parameter_needs_default():
    with pytest.raises(ValueError, match="needs a default"):
        ParamConstraint(min=25, max=300, required=True)
    with pytest.raises(ValueError):
        ParamConstraint(kind="options", options=(3, 5), required=True)


def test_huge_integer_is_rejected_cleanly(grouping_template):
    with pytest.raises(ValidationError) as exc:
        merge_instance(grouping_template, {"distance": 10**400})
    assert exc.value.param == "distance"


def test_clamp_to_max_stays_on_grid():
    constraint = ParamConstraint(min=0, max=10, step=3)
    assert check_param("distance", constraint, 100) == 9
    assert check_param("distance", constraint, 10) == 9
    assert check_param("distance", constraint, 9) == 9
    assert check_param("distance", constraint, -4) == 0


def test_remerge_of_clamped_values_is_stable():
    template = DrillTemplate(
        id="tpl_grid",
        drill_type=DrillTypeId.TIMED,
        name="Grid",
        source="personal",
        params={
            "distance": ParamConstraint(min=0, max=10, step=3, required=True, default=6),
            "par_time": ParamConstraint(min=1, max=60),
        },
    )
    first = merge_instance(template, {"distance": 100})
    assert first.values == {"distance": 9, "par_time": None}
    assert merge_instance(template, first.values) == first
    assert merge_instance(template, merge_instance(template).values) == merge_instance(template)
