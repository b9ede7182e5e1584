"""Integration tests for the health endpoints."""

from unittest.mock import patch


def test_ping(client):
    response = client.get("/api/ping")

    assert response.status_code == 200
    assert response.get_json() == {"pong": True}


def test_health_ok(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "ok"
    assert body["checks"] == {"database": True}
    assert "timestamp" in body


def test_health_degraded_when_database_down(client):
    with patch("routes.health.database.check_connection", return_value=False):
        response = client.get("/api/health")

    assert response.status_code == 503
    assert response.get_json()["status"] == "degraded"


def test_health_probes_redis_when_rate_limiting(client, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")

    with patch("routes.health.check_redis_connection", return_value=False):
        response = client.get("/api/health")

    assert response.status_code == 503
    assert response.get_json()["checks"] == {"database": True, "redis": False}


def test_security_headers_applied(client):
    response = client.get("/api/ping")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "frame-ancestors 'none'" in response.headers["Content-Security-Policy"]
    assert "Strict-Transport-Security" not in response.headers


def test_unknown_route_returns_json_404(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}
