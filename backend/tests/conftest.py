"""Shared test fixtures for the TeamSync backend test suite.

Gateways run against an in-memory SQLite database or a temporary
directory of JSON files, so no external services are needed. Fixtures are
synchronous; async tests are marked with ``pytest.mark.asyncio``.
"""

import os

# Configure the app before any teamsync import reads settings.
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "development"
os.environ["ASSIST_MODEL"] = ""
os.environ["ASSIST_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from teamsync.database import build_engine
from teamsync.main import create_app
from teamsync.repositories.gateway import PersistenceGateway
from teamsync.repositories.local_store import LocalRecordStore
from teamsync.repositories.sql_store import SqlRecordStore
from teamsync.schemas.common import Role
from teamsync.schemas.user import User


@pytest.fixture()
def sql_gateway():
    engine = build_engine("sqlite://")
    gateway = PersistenceGateway(SqlRecordStore(engine))
    yield gateway
    engine.dispose()


@pytest.fixture()
def local_gateway(tmp_path):
    return PersistenceGateway(LocalRecordStore(tmp_path))


@pytest.fixture(params=["sql", "local"])
def gateway(request):
    """Both backends: every gateway test runs twice."""
    return request.getfixturevalue(f"{request.param}_gateway")


@pytest.fixture()
def alice() -> User:
    return User(id="alice", name="Alice", role=Role.ADMIN)


@pytest.fixture()
def bob() -> User:
    return User(id="bob", name="Bob", role=Role.MEMBER)


@pytest.fixture()
def client(sql_gateway):
    """TestClient over a fresh in-memory gateway. Lifespan runs on enter."""
    app = create_app(gateway=sql_gateway)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def login(client):
    """Factory: register (ignoring a taken id) and log in, returning auth headers."""

    def _login(user_id="alice", name="Alice", password="secret123") -> dict:
        client.post("/api/auth/register", json={"id": user_id, "name": name, "password": password})
        resp = client.post("/api/auth/login", json={"id": user_id, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _login


@pytest.fixture()
def auth_headers(login) -> dict:
    """Headers for "alice", the first registered user (an Admin)."""
    return login()
