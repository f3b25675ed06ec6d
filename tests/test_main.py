"""Tests for the HTTP surface of the app object."""

from fastapi.testclient import TestClient

from app.main import app


def test_health() -> None:
    with TestClient(app) as client:
        resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "service": "backend"}


def test_root_lists_endpoints() -> None:
    with TestClient(app) as client:
        resp = client.get("/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["service"] == "backend"
    assert body["endpoints"]["health"] == "GET /health"


def test_unknown_route_is_404() -> None:
    with TestClient(app) as client:
        assert client.get("/nope").status_code == 404


def test_cors_preflight_allows_any_origin() -> None:
    with TestClient(app) as client:
        resp = client.options(
            "/health",
            headers={
                "Origin": "http://frontend.example",
                "Access-Control-Request-Method": "GET",
            },
        )
    assert resp.status_code == 200
    # credentials are allowed, so the origin is echoed instead of "*"
    assert resp.headers["access-control-allow-origin"] == "http://frontend.example"
    assert resp.headers["access-control-allow-credentials"] == "true"


def test_cors_header_on_simple_request() -> None:
    with TestClient(app) as client:
        resp = client.get("/health", headers={"Origin": "http://frontend.example"})
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] in ("*", "http://frontend.example")
