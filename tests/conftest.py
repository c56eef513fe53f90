"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from uuid import uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, ProfileModel
from tests.fakes import FakeAssetStore

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(
    engine: AsyncEngine,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create session factory."""
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    yield factory


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def fake_asset_store() -> FakeAssetStore:
    """Asset store double shared by the app under test."""
    return FakeAssetStore()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def avatar_app(
    session_factory: async_sessionmaker[AsyncSession],
    test_user: TokenUser,
    fake_asset_store: FakeAssetStore,
) -> AsyncGenerator[FastAPI, None]:
    """
    Create an app wired for avatar tests.

    This app:
    - Uses an in-memory SQLite database
    - Injects a test user profile into the database
    - Overrides auth dependency to return the test user
    - Wires AvatarService to the test database and the fake asset store
    """
    from api.dependencies.auth import get_current_user
    from api.v1.dependencies import get_avatar_service
    from domain.services.avatar_service import AvatarService
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    async with session_factory() as session:
        session.add(
            ProfileModel(
                id=test_user.id,
                email=test_user.email,
                display_name=test_user.display_name,
            )
        )
        await session.commit()

    async def override_get_user() -> TokenUser:
        return test_user

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    avatar_service = AvatarService(test_uow_factory, fake_asset_store)

    app.dependency_overrides[get_current_user] = override_get_user
    app.dependency_overrides[get_avatar_service] = lambda: avatar_service

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(avatar_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create authenticated test client for the avatar app."""
    transport = ASGITransport(app=avatar_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
