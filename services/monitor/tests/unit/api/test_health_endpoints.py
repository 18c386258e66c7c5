import asyncio


def test_healthz(app_client):
    resp = app_client.get("/healthz")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_readyz_before_startup(app_client):
    from src.main import app

    app.state.ready_event = asyncio.Event()

    assert app_client.get("/readyz").status_code == 503


def test_readyz_once_ready(app_client):
    from src.main import app

    app.state.ready_event = asyncio.Event()
    app.state.ready_event.set()

    resp = app_client.get("/readyz")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ready"}


def test_unknown_route_is_not_found(app_client):
    resp = app_client.get("/api/v1/nope")

    assert resp.status_code == 404
    assert resp.json() == {"code": "NOT_FOUND", "message": "route not found"}


def test_metrics_are_exposed(app_client):
    app_client.get("/healthz")
    resp = app_client.get("/metrics")

    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
