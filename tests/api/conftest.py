"""Shared fixtures for API tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog_api.infrastructure.credentials import encode_basic_auth
from catalog_api.main import create_app

ADMIN_PHONE = "5550100"
ADMIN_PASSWORD = "secret"


@pytest.fixture
def app(store, image_storage) -> FastAPI:
    """Application over the in-memory store and fake image storage."""
    return create_app(store=store, image_storage=image_storage)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    """Register a user and return its Basic authentication headers."""
    response = client.post(
        "/api/users/register",
        json={"name": "Admin", "phone": ADMIN_PHONE, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 201
    return {"Authorization": encode_basic_auth(ADMIN_PHONE, ADMIN_PASSWORD)}


@pytest.fixture
def auth_client(app: FastAPI, auth_headers: dict[str, str]) -> TestClient:
    """Create test client with valid credentials."""
    return TestClient(app, headers=auth_headers)
