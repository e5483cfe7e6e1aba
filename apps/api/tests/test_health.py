"""Tests for Health endpoint."""

import pytest
from httpx import AsyncClient

from portal.core.config import settings


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """
    Test health endpoint (no session needed).
    """
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["env"] == settings.ENV
    assert data["version"] == settings.VERSION
