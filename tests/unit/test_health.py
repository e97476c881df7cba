"""Unit tests for health endpoint

Basic test to verify service health check functionality.
"""

import pytest

from docuexpiry import main


@pytest.mark.unit
class TestHealthCheck:
    """Test health check endpoint"""

    @pytest.mark.asyncio
    async def test_health_returns_healthy_with_database(self, async_client):
        """Happy path: health check reports a connected database"""
        response = await async_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "docuexpiry"
        assert body["database_connected"] is True

    @pytest.mark.asyncio
    async def test_health_degraded_without_database(self, async_client, monkeypatch):
        """Health check degrades when no database client is set"""
        monkeypatch.setattr(main, "db_client", None)

        response = await async_client.get("/health")

        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_root_banner(self, async_client):
        response = await async_client.get("/")
        assert response.json() == {"service": "docuexpiry", "version": "1.0.0", "status": "running"}
