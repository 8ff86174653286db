"""
Tests for the health endpoint and application-level error handling.
"""

from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from movies_api.api.dependencies import get_database_manager, get_db
from movies_api.api.main import app


class TestHealth:
    """Tests for GET /healthz."""

    def test_healthy(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_database_unavailable(self, client, settings):
        manager = MagicMock()
        manager.ping.return_value = False
        app.dependency_overrides[get_database_manager] = lambda: manager

        response = client.get("/healthz")

        assert response.status_code == 503
        assert response.json() == {"status": "unavailable"}
        manager.ping.assert_called_once_with(timeout=settings.health_timeout_secs)


class TestErrorHandling:
    """Tests for the shared error body."""

    def test_database_error_is_internal(self, client):
        """Test that an unexpected database failure maps to a generic 500."""
        def broken_db():
            session = MagicMock()
            session.scalars.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
            yield session

        app.dependency_overrides[get_db] = broken_db

        response = client.get("/movies")

        assert response.status_code == 500
        assert response.json() == {"code": "INTERNAL_ERROR", "message": "Internal server error"}
