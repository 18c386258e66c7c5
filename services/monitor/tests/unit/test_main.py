from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient


class TestMainApplication:
    """Lifespan wiring of the monitor API."""

    @patch("src.main.initialize_application")
    @patch("src.main.ClickHouseClient")
    def test_startup_connects_and_becomes_ready(self, mock_client_cls, mock_init):
        from src.infrastructure.clickhouse.repository import MonitorRepository
        from src.main import app

        with TestClient(app) as client:
            mock_init.assert_called_once()
            assert client.get("/readyz").status_code == 200
            assert isinstance(app.state.repo, MonitorRepository)
            assert app.state.repo.client is mock_client_cls.return_value

        mock_client_cls.return_value.close.assert_called_once()
        assert not app.state.ready_event.is_set()

    @patch("src.main.initialize_application")
    @patch("src.main.ClickHouseClient")
    def test_clickhouse_connect_is_retried(self, mock_client_cls, _mock_init):
        from src.main import app

        connected = MagicMock()
        mock_client_cls.side_effect = [ConnectionError("refused"), connected]

        with TestClient(app):
            assert app.state.clickhouse is connected

        assert mock_client_cls.call_count == 2

    def test_routes_are_registered(self):
        from src.main import app

        paths = {getattr(route, "path", "") for route in app.routes}
        assert {
            "/healthz",
            "/readyz",
            "/metrics",
            "/api/v1/collect",
            "/api/v1/dashboard/overview",
            "/api/v1/dashboard/charts",
            "/api/v1/dashboard/routes",
            "/api/v1/dashboard/errors",
        } <= paths
