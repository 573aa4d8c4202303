"""Tests for the /health endpoint."""

from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient) -> None:
    """GET /health should return 200 with status 'ok'."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


def test_health_template_counts(client: TestClient) -> None:
    """GET /health response must contain loaded template counts."""
    response = client.get("/health")
    templates = response.json()["templates"]
    assert templates["npc_templates"] > 0
    assert templates["dialogue_trees"] > 0
