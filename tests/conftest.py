"""
Shared fixtures: a temporary sqlite database per test and an app bound to it.
"""
import os
import shutil
import tempfile

import pytest
from fastapi.testclient import TestClient

from tasktrack.app import create_app
from tasktrack.config import Settings
from tasktrack.database import TaskDatabase
from tasktrack.dependencies.services import set_services
from tasktrack.storage.task_repository import TaskRepository


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    temp_dir = tempfile.mkdtemp()
    db_path = os.path.join(temp_dir, "test.db")
    db = TaskDatabase(db_path)
    yield db
    shutil.rmtree(temp_dir)


@pytest.fixture
def repo(temp_db):
    """Task repository backed by the temporary database."""
    return TaskRepository(temp_db)


@pytest.fixture
def app(temp_db):
    """Application wired to the temporary database."""
    settings = Settings(db_path=temp_db.db_path, log_level="WARNING")
    app = create_app(settings=settings, db=temp_db)
    yield app
    set_services(None)


@pytest.fixture
def client(app):
    """Create a test client."""
    with TestClient(app) as test_client:
        yield test_client
