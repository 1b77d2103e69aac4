"""
API test fixtures.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from tutorgate.core.database import get_db
from tutorgate.main import app


@pytest.fixture
async def client(db_session):
    """Create test client with database dependency override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
