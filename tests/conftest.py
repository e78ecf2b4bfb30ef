"""
Pytest configuration and shared fixtures.

Every test gets its own SQLite file under ``tmp_path`` so tests never
share state.  Service tests drive the async services with
``asyncio.run``; API tests go through FastAPI's ``TestClient`` with
tokens for the ``admin`` and ``user`` roles.
"""

import pytest
from fastapi.testclient import TestClient

from clinic_directory_api.app.core.config import Settings
from clinic_directory_api.app.core.db import init_db
from clinic_directory_api.app.core.security import create_access_token
from clinic_directory_api.app.main import create_app
from clinic_directory_api.app.services import build_services


@pytest.fixture
def database_path(tmp_path):
    """Path of a freshly migrated database."""
    path = str(tmp_path / "clinic_directory_test.db")
    init_db(path)
    return path


@pytest.fixture
def services(database_path):
    """Service registry bound to the test database."""
    return build_services(database_path)


@pytest.fixture
def client(tmp_path):
    """
    Provide a TestClient for an app using its own database.

    Entering the client runs the lifespan, which migrates the database
    and builds the services.
    """
    app = create_app(Settings(database_url=str(tmp_path / "clinic_directory_api.db")))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    token = create_access_token("admin@example.com", "admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    token = create_access_token("user@example.com", "user")
    return {"Authorization": f"Bearer {token}"}
