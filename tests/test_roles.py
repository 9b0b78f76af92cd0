import pytest

from rangecore.domain import (
    OrgRole,
    TeamRole,
    at_least,
    describe_org_role,
    describe_team_role,
    normalize_org_role,
    normalize_team_role,
    rank,
)

ALL_ROLES = list(OrgRole) + list(TeamRole)


@pytest.mark.parametrize("role", ALL_ROLES + [None, "", "general", "ROOT", 42])
def test_soldier_is_lower_bound(role):
    assert rank(role) >= rank(OrgRole.SOLDIER)


def test_org_hierarchy_is_total_order():
    ordered = [OrgRole.SOLDIER, OrgRole.SQUAD_COMMANDER, OrgRole.TEAM_COMMANDER, OrgRole.UNIT_COMMANDER]
    ranks = [rank(r) for r in ordered]
    assert ranks == sorted(ranks)
    assert len(set(ranks)) == len(ranks)


def test_unknown_role_ranks_as_soldier():
    assert rank("field_marshal") == rank(OrgRole.SOLDIER)
    assert rank(None) == rank(TeamRole.SOLDIER)


def test_canonical_strings_rank_like_enums():
    assert rank("unit_commander") == rank(OrgRole.UNIT_COMMANDER)
    assert rank("owner") == rank(TeamRole.OWNER)
    # Spellings are not normalized by the hierarchy itself
    assert rank("Unit Commander") == rank(OrgRole.SOLDIER)


def test_at_least():
    assert at_least(OrgRole.UNIT_COMMANDER, OrgRole.TEAM_COMMANDER)
    assert at_least(OrgRole.SQUAD_COMMANDER, OrgRole.SQUAD_COMMANDER)
    assert not at_least(OrgRole.SOLDIER, OrgRole.SQUAD_COMMANDER)
    assert not at_least(None, OrgRole.SQUAD_COMMANDER)
    assert at_least(TeamRole.COMMANDER, TeamRole.SQUAD_COMMANDER)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("squad_commander", OrgRole.SQUAD_COMMANDER),
        ("org:squad_commander", OrgRole.SQUAD_COMMANDER),
        ("  Team Commander ", OrgRole.TEAM_COMMANDER),
        ("unit-commander", OrgRole.UNIT_COMMANDER),
        ("owner", OrgRole.UNIT_COMMANDER),
        ("admin", OrgRole.TEAM_COMMANDER),
        ("instructor", OrgRole.SQUAD_COMMANDER),
        ("member", OrgRole.SOLDIER),
        ({"role": "org:unit_commander"}, OrgRole.UNIT_COMMANDER),
        ({"access_role": "admin"}, OrgRole.TEAM_COMMANDER),
        (OrgRole.SOLDIER, OrgRole.SOLDIER),
        (TeamRole.SQUAD_COMMANDER, OrgRole.SQUAD_COMMANDER),
    ],
)
def test_normalize_org_role(raw, expected):
    assert normalize_org_role(raw) is expected


@pytest.mark.parametrize("raw", [None, "", "commander", "general", True, {}, {"other": "x"}, 3])
def test_normalize_org_role_unknown_is_none(raw):
    assert normalize_org_role(raw) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("commander", TeamRole.COMMANDER),
        ("team:owner", TeamRole.OWNER),
        ("team_commander", TeamRole.COMMANDER),
        ("Squad Commander", TeamRole.SQUAD_COMMANDER),
        ({"team_role": "soldier"}, TeamRole.SOLDIER),
    ],
)
def test_normalize_team_role(raw, expected):
    assert normalize_team_role(raw) is expected


def test_normalize_with_explicit_tables():
    role = normalize_org_role("idp/boss", aliases={"boss": "unit_commander"}, prefixes=["idp/"])
    assert role is OrgRole.UNIT_COMMANDER


def test_normalize_reads_role_attribute():
    class Membership:
        role = "org:team_commander"

    assert normalize_org_role(Membership()) is OrgRole.TEAM_COMMANDER


def test_describe_roles():
    info = describe_org_role(OrgRole.SQUAD_COMMANDER)
    assert info.display_name == "Squad Commander"
    assert info.level == 2

    owner = describe_team_role(TeamRole.OWNER)
    assert owner.icon == "shield-checkmark"
    assert owner.level == 4

    empty = describe_team_role(None)
    assert empty.role is None
    assert empty.level == 0
    assert empty.display_name == "No Role"
