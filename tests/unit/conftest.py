"""Shared fixtures for unit tests."""

from uuid import UUID, uuid4

import pytest

from tests.fakes import FakeAssetStore, FakeUnitOfWork, InMemoryProfileRepository


@pytest.fixture
def events() -> list[tuple[str, str]]:
    """Ordered log of store/update/destroy calls shared by the fakes."""
    return []


@pytest.fixture
def profiles(events: list[tuple[str, str]]) -> InMemoryProfileRepository:
    return InMemoryProfileRepository(events)


@pytest.fixture
def asset_store(events: list[tuple[str, str]]) -> FakeAssetStore:
    return FakeAssetStore(events)


@pytest.fixture
def uow(profiles: InMemoryProfileRepository) -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork backed by the in-memory repository."""
    return FakeUnitOfWork(profiles)


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()
