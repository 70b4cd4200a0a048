"""Tests for application assembly: routes, health check and startup auth."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from api.main import create_app


class TestCreateApp:
    def test_health(self):
        client = TestClient(create_app())

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "camp-occupancy-api"}

    def test_routes_registered(self):
        paths = {route.path for route in create_app().routes}

        assert "/api/bed-diagnostics" in paths
        assert "/api/bed-diagnostics/fix" in paths
        assert "/api/reports/export/{report_type}" in paths

    def test_startup_authenticates(self):
        with (
            patch("api.main.authenticate_pb", new_callable=AsyncMock) as mock_auth,
            patch("api.main.get_settings") as mock_settings,
        ):
            mock_settings.return_value.skip_pb_auth = False
            mock_settings.return_value.allowed_origins = ["http://localhost:3000"]
            with TestClient(create_app()):
                pass

        mock_auth.assert_awaited_once()

    def test_startup_skips_auth_when_configured(self):
        with (
            patch("api.main.authenticate_pb", new_callable=AsyncMock) as mock_auth,
            patch("api.main.get_settings") as mock_settings,
        ):
            mock_settings.return_value.skip_pb_auth = True
            mock_settings.return_value.allowed_origins = ["http://localhost:3000"]
            with TestClient(create_app()):
                pass

        mock_auth.assert_not_awaited()


class TestDependencies:
    def test_routers_share_one_store_dependency(self):
        import api.dependencies as dependencies

        assert sorted(dependencies.__all__) == ["authenticate_pb", "get_entity_store", "pb"]
        assert not hasattr(dependencies, "get_pb_client")
