"""
Unit Tests for the FastAPI application

Endpoints that do not need a database.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from tutorgate.main import app, create_app


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["service"] == "TutorGate"


async def test_liveness(client):
    response = await client.get("/health/live")

    assert response.json() == {"status": "alive"}


async def test_openapi_lists_release_routes(client):
    response = await client.get("/openapi.json")

    paths = response.json()["paths"]
    assert "/api/v1/content" in paths
    assert "/api/v1/content/{content_id}/submissions" in paths
    assert "/api/v1/classes/{class_id}/curriculum" in paths
    assert "/api/v1/operations/sweeps/curriculum" in paths


def test_create_app_returns_fresh_instance():
    assert create_app() is not app
