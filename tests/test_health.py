"""Tests for health check endpoints."""

from fastapi.testclient import TestClient

from catalog_api.main import create_app


def test_health_check(store, image_storage) -> None:
    """Test health endpoint returns healthy status."""
    client = TestClient(create_app(store=store, image_storage=image_storage))
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "catalog-api"
    assert "version" in data


def test_readiness_check(store, image_storage) -> None:
    """Test readiness endpoint pings the store."""
    client = TestClient(create_app(store=store, image_storage=image_storage))
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_readiness_check_store_down(store, image_storage) -> None:
    """Readiness fails when the store does not answer."""

    async def unreachable() -> bool:
        return False

    store.ping = unreachable
    client = TestClient(create_app(store=store, image_storage=image_storage))
    response = client.get("/ready")
    assert response.status_code == 503


def test_lifespan_closes_collaborators(store, image_storage) -> None:
    """Shutdown closes the image storage client."""
    with TestClient(create_app(store=store, image_storage=image_storage)) as client:
        assert client.get("/health").status_code == 200
    assert image_storage.closed is True
