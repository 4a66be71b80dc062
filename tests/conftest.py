import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlmodel import create_engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("TASKS_TABLE", "test_tasks")

from config import Settings  # noqa: E402
from database import create_db_and_tables  # noqa: E402
from main import create_app  # noqa: E402
from repository import TaskRepository  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(
        table_name="test_tasks",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        region="us-east-1",
        offline=False,
        echo=False,
        cors_origins=("http://localhost:3000",),
        log_level="INFO",
    )


@pytest.fixture
def engine(settings):
    engine = create_engine(settings.database_url, connect_args={"check_same_thread": False})
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    return TaskRepository(engine)


@pytest.fixture
def app(settings, repository):
    return create_app(settings, repository)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_item():
    def _make(**overrides):
        item = {
            "id": "test-task-id",
            "user_id": "default-user",
            "title": "Test Task",
            "description": "Test Description",
            "status": "pending",
            "priority": "medium",
            "due_date": None,
            "created_at": "2025-09-19T12:00:00.000000+00:00",
            "updated_at": "2025-09-19T12:00:00.000000+00:00",
        }
        item.update(overrides)
        return item

    return _make
