"""Tests for the unauthenticated endpoints and fallback errors."""


def test_health_returns_ok(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "1.0.0"
    assert "message" in data
    assert "timestamp" in data


def test_list_models(client):
    response = client.get("/api/models")
    assert response.status_code == 200
    data = response.json()
    ids = [m["id"] for m in data["text_models"]]
    assert data["default_model"] in ids
    assert all("name" in m for m in data["text_models"])


def test_unknown_path_returns_404(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Endpoint not found"}


def test_unknown_method_returns_404(client):
    response = client.get("/api/chat")
    assert response.status_code == 404
    assert response.json() == {"error": "Endpoint not found"}
