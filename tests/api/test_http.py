"""
Tests for the plain HTTP surface: health, REST placeholders, protected route
"""
import random

import jwt
from fastapi.testclient import TestClient

from app.app import create_app
from app.core.security import create_access_token
from app.services.metrics.store import MetricsStore


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["name"] == "LlamaFlow"
    assert data["timestamp"].endswith("Z")


def test_latest_placeholder(client):
    response = client.get("/api/metrics/latest")

    assert response.status_code == 200
    assert response.json() == {"message": "Use GraphQL latestMetric query"}


def test_history_placeholder(client):
    response = client.get("/api/metrics/history")

    assert response.status_code == 200
    assert response.json() == {"message": "Use GraphQL metrics query"}


class TestProtectedRoute:
    """Test suite for /api/protected"""

    def test_missing_header(self, client):
        response = client.get("/api/protected")

        assert response.status_code == 401
        assert response.json() == {"error": "Missing Authorization header"}

    def test_invalid_token(self, client):
        response = client.get("/api/protected", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    def test_token_signed_with_other_secret(self, client):
        token = jwt.encode({"sub": "alice"}, "some-other-secret", algorithm="HS256")

        response = client.get("/api/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    def test_valid_token(self, client):
        token = create_access_token("alice")

        response = client.get("/api/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"ok": True, "message": "You accessed a protected route"}

    def test_expired_token(self, client):
        token = create_access_token("alice", expires_minutes=-1)

        response = client.get("/api/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}


def test_unknown_path_without_spa_is_404(client):
    response = client.get("/some/client/route")

    assert response.status_code == 404


def test_spa_fallback_serves_index(tmp_path):
    static_dir = tmp_path / "web"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<html>llamaflow</html>")

    app = create_app(store=MetricsStore(rng=random.Random(0)), update_interval=3600, static_dir=str(static_dir))
    with TestClient(app) as client:
        root = client.get("/")
        deep_link = client.get("/dashboard/tvl")
        api_miss = client.get("/api/nope")

    assert root.status_code == 200
    assert "llamaflow" in root.text
    assert deep_link.status_code == 200
    assert "llamaflow" in deep_link.text
    assert api_miss.status_code == 404


def test_lifespan_seeds_and_starts_scheduler(tmp_path):
    store = MetricsStore(rng=random.Random(0))
    app = create_app(store=store, update_interval=3600, static_dir=str(tmp_path))

    with TestClient(app):
        assert len(store) == 25
        assert app.state.scheduler.is_running

    assert not app.state.scheduler.is_running
