import os

import pytest
from fastapi.testclient import TestClient

from app.api import routes
from app.config import settings


@pytest.fixture
def db_path(tmp_path, monkeypatch) -> str:
    """Point the store at a fresh SQLite file."""
    path = os.path.join(tmp_path, "reports.db")
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{path}")
    from app import db

    db.init_db()
    return path


@pytest.fixture
def client(db_path, monkeypatch):
    monkeypatch.setattr(settings, "MOCK_ASSISTANT", True)
    monkeypatch.setattr(settings, "USER_ROLE", "ADMIN")
    routes.reset_state()
    from app.main import app

    with TestClient(app) as c:
        yield c
    routes.reset_state()


@pytest.fixture
def sample_payload() -> dict:
    return {
        "patient_name": "Jane Doe",
        "room_no": "4B",
        "fac_hosp": "St. Mary's",
        "site": "Heel",
        "type_stage": "Stage 2",
        "week1": "4 x 3 x 0.5",
        "week2": "3 x 2 x 0.5",
        "current_treatment": "Hydrocolloid",
    }
