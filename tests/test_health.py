"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status, version, and components fields
  - no authentication required
  - a database failure degrades the status instead of erroring
"""

from __future__ import annotations

from sqlalchemy.exc import OperationalError

from api.main import API_VERSION


def test_health_returns_200_with_components(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"] == API_VERSION
    assert data["components"] == {"app": "ok", "database": "ok"}


def test_health_ignores_bad_tokens(client):
    resp = client.get("/api/v1/health", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 200


def test_health_reports_degraded_database(client, env, monkeypatch):
    def broken():
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    monkeypatch.setattr(env.user_store, "has_users", broken)
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["components"]["database"] == "error"
