import pytest

from rangecore.domain import DrillTypeId
from rangecore.exceptions import NotFoundError
from rangecore.logic import default_params, get_drill_type, is_param_required, list_drill_types


def test_registry_order_is_stable():
    ids = [d.id for d in list_drill_types()]
    assert ids == [DrillTypeId.ZEROING, DrillTypeId.GROUPING, DrillTypeId.TIMED, DrillTypeId.QUALIFICATION]
    assert [d.id for d in list_drill_types()] == ids


def test_listing_is_a_copy():
    listing = list_drill_types()
    listing.clear()
    assert len(list_drill_types()) == 4


@pytest.mark.parametrize("key", ["grouping", "GROUPING", " Grouping ", DrillTypeId.GROUPING])
def test_get_drill_type_lookup(key):
    assert get_drill_type(key).id is DrillTypeId.GROUPING


@pytest.mark.parametrize("key", ["sniping", "", None])
def test_get_drill_type_unknown(key):
    with pytest.raises(NotFoundError):
        get_drill_type(key)


def test_required_params():
    assert get_drill_type("zeroing").required_params == ["distance", "shots"]
    assert get_drill_type("qualification").required_params == ["distance", "shots", "min_score"]
    assert "par_time" in get_drill_type("timed").optional_params


def test_is_param_required():
    assert is_param_required("qualification", "min_score")
    assert not is_param_required("grouping", "min_score")
    assert not is_param_required("timed", "par_time")
    with pytest.raises(NotFoundError):
        is_param_required("bogus", "distance")


def test_defaults_respect_constraints():
    for definition in list_drill_types():
        for name, constraint in definition.params.items():
            default = constraint.default
            if default is None:
                assert not constraint.required, f"{definition.id.value}.{name}"
                continue
            if constraint.kind == "options":
                assert default in constraint.options
            else:
                assert constraint.min <= default <= constraint.max


def test_default_params():
    assert default_params(DrillTypeId.TIMED) == {
        "distance": 7,
        "shots": 6,
        "par_time": None,
        "time_limit": None,
        "target_count": 1,
        "strings": 1,
    }


def test_config_sections_reference_known_params():
    for definition in list_drill_types():
        for section in definition.config_sections:
            assert set(section.params) <= set(definition.params)


def test_scoring_and_input_methods():
    assert get_drill_type("zeroing").scoring_model == "dispersion"
    assert get_drill_type("timed").input_method == "manual"
    assert get_drill_type("qualification").scoring_model == "pass_fail"


def test_distance_is_a_stepped_range():
    zeroing = get_drill_type("zeroing").params["distance"]
    assert zeroing.kind == "range"
    assert (zeroing.min, zeroing.max, zeroing.step) == (25, 300, 25)
    assert get_drill_type("timed").params["distance"].step == 1
