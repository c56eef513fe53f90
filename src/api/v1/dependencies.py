"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from domain.services.avatar_service import AvatarService
from domain.services.user_locks import UserLockRegistry
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.storage.cloudinary_store import CloudinaryAssetStore


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_asset_store() -> CloudinaryAssetStore:
    """Get the shared Cloudinary asset store."""
    return CloudinaryAssetStore()


@lru_cache
def get_user_locks() -> UserLockRegistry:
    """Get the process-wide per-user lock registry."""
    return UserLockRegistry()


@lru_cache
def get_avatar_service() -> AvatarService:
    """Get Avatar service instance."""
    return AvatarService(
        get_uow_factory(),
        asset_store=get_asset_store(),
        locks=get_user_locks(),
    )
