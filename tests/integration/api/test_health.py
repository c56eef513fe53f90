"""Tests for health check endpoints."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.routes.health import API_VERSION
from core.config import settings
from infrastructure.database.session import get_async_session


@pytest.fixture
async def health_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Client whose database dependency points at the test engine."""
    from main import create_app

    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def cloudinary_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "cloudinary_cloud_name", "demo")
    monkeypatch.setattr(settings, "cloudinary_api_key", "key-4f1e9a")
    monkeypatch.setattr(settings, "cloudinary_api_secret", "s3cr3t")


@pytest.fixture
def no_cloudinary_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "cloudinary_cloud_name", "demo")
    monkeypatch.setattr(settings, "cloudinary_api_key", "")
    monkeypatch.setattr(settings, "cloudinary_api_secret", "")


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_basic_health_skips_dependencies(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["version"] == API_VERSION
        assert data["environment"] == settings.app_env
        assert data["database"] is None
        assert data["storage"] is None


class TestDetailedHealthEndpoint:
    @pytest.mark.asyncio
    async def test_healthy_with_database_and_storage_credentials(
        self, health_client: AsyncClient, cloudinary_credentials: None
    ) -> None:
        response = await health_client.get("/health/detailed")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["storage"] == "configured"

    @pytest.mark.asyncio
    async def test_degraded_without_storage_credentials(
        self, health_client: AsyncClient, no_cloudinary_credentials: None
    ) -> None:
        response = await health_client.get("/health/detailed")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "degraded"
        assert data["database"] == "healthy"
        assert data["storage"] == "not_configured"

    @pytest.mark.asyncio
    async def test_never_reports_secret_values(
        self, health_client: AsyncClient, cloudinary_credentials: None
    ) -> None:
        response = await health_client.get("/health/detailed")

        assert "s3cr3t" not in response.text
        assert "key-4f1e9a" not in response.text
