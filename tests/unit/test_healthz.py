"""
Unit tests for /healthz and the application lifespan.

Tests:
  - Health check with and without a database
  - Startup aborts when the database is unreachable
  - Shutdown closes the pool
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.container import Container, build_session_manager
from app.exceptions import DatabaseError
from app.infrastructure.db import DatabaseConnectionError
from app.main import create_app

pytestmark = pytest.mark.unit


def _app_with_database(settings, repository, database):
    container = Container(
        settings=settings,
        database=database,
        employee_repository=repository,
        sessions=build_session_manager(settings),
    )
    return create_app(container=container)


class TestHealthz:
    def test_without_database(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert response.json()["db"] == "disabled"

    def test_database_connected(self, settings, repository):
        database = MagicMock()
        database.stats.return_value = {"pool_size": 1}

        with TestClient(_app_with_database(settings, repository, database)) as client:
            body = client.get("/healthz").json()

        assert body["ok"] is True
        assert body["db"] == "connected"
        assert body["pool"] == {"pool_size": 1}

    def test_database_disconnected(self, settings, repository):
        database = MagicMock()

        with TestClient(_app_with_database(settings, repository, database)) as client:
            database.ping.side_effect = DatabaseError("gone")
            response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {
            "ok": False,
            "db": "disconnected",
            "request_id": response.headers["x-request-id"],
        }


class TestLifespan:
    def test_startup_opens_and_pings(self, settings, repository):
        database = MagicMock()

        with TestClient(_app_with_database(settings, repository, database)):
            database.open.assert_called_once()
            database.ping.assert_called_once()
            database.close.assert_not_called()

        database.close.assert_called_once()

    def test_startup_fails_when_database_unreachable(self, settings, repository):
        database = MagicMock()
        database.open.side_effect = DatabaseConnectionError("refused")
        app = _app_with_database(settings, repository, database)

        with pytest.raises(RuntimeError):
            with TestClient(app):
                pass
        database.close.assert_called_once()
