"""Tests for the health check API endpoint."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def test_client():
    """Create a test client without lifespan."""
    from fastapi import FastAPI
    from csvbridge.api.routes import router

    app = FastAPI()
    app.include_router(router, prefix="/api")

    return TestClient(app)


class TestHealthEndpoint:
    """Test the /api/health endpoint."""

    def test_health_check_returns_ok_status(self, test_client):
        """Test that health check returns status 'ok'."""
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "csvbridge"
        assert isinstance(data["active_sessions"], int)

    def test_health_check_shows_token_presence_without_secret(self, test_client):
        """Test that health check shows token presence without exposing it."""
        with patch("csvbridge.api.routes.settings") as mock_settings:
            mock_settings.import_service_url = "http://import.test/api"
            mock_settings.import_service_token = "super-secret-token"

            response = test_client.get("/api/health")

        assert response.status_code == 200
        config = response.json()["config"]
        assert config["import_service_url"] == "http://import.test/api"
        assert config["import_service_token_present"] is True
        assert "super-secret-token" not in response.text

    def test_health_check_without_token(self, test_client):
        with patch("csvbridge.api.routes.settings") as mock_settings:
            mock_settings.import_service_url = "http://import.test/api"
            mock_settings.import_service_token = None

            response = test_client.get("/api/health")

        assert response.json()["config"]["import_service_token_present"] is False


class TestLimitsEndpoint:
    """Test the /api/config/limits endpoint."""

    def test_limits(self, test_client):
        with patch("csvbridge.api.routes.settings") as mock_settings:
            mock_settings.max_file_size = 10485760
            mock_settings.default_max_records = 500

            data = test_client.get("/api/config/limits").json()

        assert data == {
            "max_file_size": 10485760,
            "default_max_records": 500,
            "accepted_extensions": [".csv"],
        }


class TestCreateApp:
    """Test the application factory."""

    def test_create_app_mounts_routes(self):
        from csvbridge.api import create_app

        client = TestClient(create_app())
        response = client.get("/api/health")

        assert response.status_code == 200

    def test_get_service_is_cached(self):
        from csvbridge.api import app as app_module

        with patch.object(app_module, "_service", None):
            first = app_module.get_service()
            second = app_module.get_service()

        assert first is second
