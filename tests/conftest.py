import pytest
from fastapi.testclient import TestClient

from rangecore.api.main import create_app
from rangecore.config import settings
from rangecore.data import Database, TemplateStore
from rangecore.domain import DrillTemplate, DrillTypeId, ParamConstraint


@pytest.fixture
def grouping_template():
    """
    "5-Shot Grouping": distance is editable within 25-300m, shot count is locked.
    """
    return DrillTemplate(
        id="tpl_5shot",
        drill_type=DrillTypeId.GROUPING,
        name="5-Shot Grouping",
        source="team",
        team_id="team-alpha",
        params={
            "distance": ParamConstraint(min=25, max=300, default=100, locked=False),
            "shots": ParamConstraint(default=5, locked=True),
        },
    )


@pytest.fixture
def store(tmp_path):
    return TemplateStore(Database(tmp_path / "templates.db"))


@pytest.fixture
def client(tmp_path):
    settings.security.api_token = None
    app = create_app(db_path=tmp_path / "api.db")
    return TestClient(app)


@pytest.fixture
def commander_headers():
    return {"X-User-Id": "u-cmd", "X-Org-Role": "org:team_commander", "X-Team-Id": "team-alpha"}


@pytest.fixture
def soldier_headers():
    return {
        "X-User-Id": "u-sol",
        "X-Org-Role": "soldier",
        "X-Team-Role": "soldier",
        "X-Team-Id": "team-alpha",
    }
