"""Avatar service layer: profile picture lifecycle across profile and asset store."""

import asyncio
import re
import secrets
from collections.abc import Callable, Sequence
from datetime import datetime
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import (
    AppException,
    DependencyError,
    InvalidFileError,
    NoFileProvidedError,
    PersistenceError,
    UserNotFoundError,
    VersionConflictError,
)
from domain.entities.asset import AssetReference, AvatarFile, StoreOptions
from domain.entities.profile import Profile
from domain.repositories.asset_store import IAssetStore
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.user_locks import UserLockRegistry

logger = structlog.get_logger()

_PUBLIC_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


class AvatarService:
    """Service layer for avatar upload, retrieval and replacement.

    The profile keeps only a reference to the remote asset. New assets are
    stored and committed before the previous one is destroyed, so a failure
    at any step leaves the user with a working avatar. Every call holds the
    user's lock; the profile version check covers writers in other processes.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        asset_store: IAssetStore,
        locks: UserLockRegistry | None = None,
        *,
        folder: str = settings.avatar_folder,
        resource_type: str = settings.avatar_resource_type,
        overwrite: bool = settings.avatar_overwrite,
        max_files: int = settings.avatar_max_files,
        max_bytes: int = settings.avatar_max_bytes,
        allowed_content_types: Sequence[str] | None = None,
        upload_concurrency: int = settings.avatar_upload_concurrency,
        update_retries: int = settings.avatar_update_retries,
    ) -> None:
        self._uow_factory = uow_factory
        self._asset_store = asset_store
        self._locks = locks or UserLockRegistry()
        self._folder = folder
        self._resource_type = resource_type
        self._overwrite = overwrite
        self._max_files = max_files
        self._max_bytes = max_bytes
        if allowed_content_types is None:
            allowed_content_types = settings.avatar_allowed_content_types_list
        self._allowed_content_types = {ct.lower() for ct in allowed_content_types}
        self._upload_concurrency = max(1, upload_concurrency)
        self._update_retries = max(1, update_retries)

    async def get(self, user_id: UUID) -> AssetReference:
        """Return the current avatar reference; both fields are None without one.

        Reads take the user's lock too, so a read issued after an upload
        from the same user sees that upload's result. The wait is bounded by
        the upload in flight.
        """
        async with self._locks.hold(user_id):
            profile = await self._require_profile(user_id)
            return profile.avatar or AssetReference(url=None, asset_id=None)

    async def upload(self, user_id: UUID, files: Sequence[AvatarFile]) -> AssetReference:
        """Store the first file as the user's avatar.

        An existing avatar is cleaned up exactly like ``replace`` does.
        """
        return await self._set_avatar(user_id, files, operation="upload")

    async def replace(self, user_id: UUID, files: Sequence[AvatarFile]) -> AssetReference:
        """Swap the user's avatar for the first file, then delete the old asset."""
        return await self._set_avatar(user_id, files, operation="replace")

    async def _set_avatar(
        self, user_id: UUID, files: Sequence[AvatarFile], operation: str
    ) -> AssetReference:
        async with self._locks.hold(user_id):
            profile = await self._require_profile(user_id)
            self._validate_files(files)

            references = await self._store_all(user_id, files)
            current, unused = references[0], references[1:]

            try:
                previous = await self._persist(profile, current)
            except Exception:
                await self._release(user_id, references, reason="compensation")
                raise

            logger.info(
                "avatar_committed",
                operation=operation,
                user_id=str(user_id),
                asset_id=current.asset_id,
                previous_asset_id=previous.asset_id if previous else None,
            )

            await self._release(user_id, unused, reason="unused")
            if previous and previous.asset_id and previous.asset_id != current.asset_id:
                await self._release(user_id, [previous], reason="replaced")

            return current

    async def _require_profile(self, user_id: UUID) -> Profile:
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
        if not profile:
            raise UserNotFoundError(str(user_id))
        return profile

    def _validate_files(self, files: Sequence[AvatarFile]) -> None:
        """Reject the request before any remote call is made."""
        if not files:
            raise NoFileProvidedError()
        if len(files) > self._max_files:
            raise InvalidFileError(f"At most {self._max_files} files may be uploaded at once")
        for file in files:
            if file.size == 0:
                raise InvalidFileError("Uploaded file is empty", file.filename)
            if file.size > self._max_bytes:
                raise InvalidFileError(
                    f"File exceeds the maximum size of {self._max_bytes} bytes",
                    file.filename,
                )
            if self._allowed_content_types and (
                file.content_type.lower() not in self._allowed_content_types
            ):
                raise InvalidFileError(
                    f"Unsupported content type: {file.content_type}", file.filename
                )

    async def _store_all(
        self, user_id: UUID, files: Sequence[AvatarFile]
    ) -> list[AssetReference]:
        """Store every file with bounded concurrency, preserving input order.

        If any store fails, the ones that succeeded are released and the
        failure is raised as DependencyError.
        """
        semaphore = asyncio.Semaphore(self._upload_concurrency)

        async def store_one(file: AvatarFile) -> AssetReference:
            async with semaphore:
                return await self._store_one(user_id, file)

        results = await asyncio.gather(
            *(store_one(file) for file in files), return_exceptions=True
        )

        stored = [r for r in results if isinstance(r, AssetReference)]
        failures = [r for r in results if isinstance(r, BaseException)]
        if not failures:
            return stored

        await self._release(user_id, stored, reason="compensation")
        failure = failures[0]
        if isinstance(failure, DependencyError) or not isinstance(failure, Exception):
            raise failure
        raise DependencyError(
            "Failed to upload avatar",
            details={"reason": type(failure).__name__},
        ) from failure

    async def _store_one(self, user_id: UUID, file: AvatarFile) -> AssetReference:
        options = StoreOptions(
            folder=self._folder,
            public_id=self._public_id_for(file),
            overwrite=self._overwrite,
            resource_type=self._resource_type,
        )
        try:
            reference = await self._asset_store.store(file, options)
        except DependencyError:
            logger.warning(
                "avatar_store_failed",
                user_id=str(user_id),
                filename=file.filename,
            )
            raise

        # Reconciliation record: an orphan sweep matches these against profiles.
        logger.info(
            "avatar_asset_stored",
            user_id=str(user_id),
            asset_id=reference.asset_id,
            url=reference.url,
            stored_at=datetime.utcnow().isoformat(),
        )
        return reference

    async def _persist(
        self, profile: Profile, reference: AssetReference
    ) -> AssetReference | None:
        """Write the reference onto the profile and return the one it replaced.

        Version conflicts re-read the profile and retry; the reference
        returned is always the one actually overwritten.
        """
        user_id = profile.id
        for attempt in range(1, self._update_retries + 1):
            try:
                async with self._uow_factory() as uow:
                    await uow.profiles.update_avatar(
                        user_id,
                        avatar_url=reference.url,
                        avatar_asset_id=reference.asset_id,
                        expected_version=profile.avatar_version,
                    )
                    await uow.commit()
                return profile.avatar
            except VersionConflictError:
                logger.warning(
                    "avatar_version_conflict",
                    user_id=str(user_id),
                    attempt=attempt,
                    expected_version=profile.avatar_version,
                )
                profile = await self._require_profile(user_id)
            except AppException:
                raise
            except Exception as e:
                logger.error(
                    "avatar_persist_failed",
                    user_id=str(user_id),
                    asset_id=reference.asset_id,
                    error_type=type(e).__name__,
                )
                raise PersistenceError(details={"reason": type(e).__name__}) from e

        logger.error(
            "avatar_persist_failed",
            user_id=str(user_id),
            asset_id=reference.asset_id,
            error_type="VersionConflictError",
            attempts=self._update_retries,
        )
        raise PersistenceError(
            "Failed to save avatar: profile kept changing concurrently",
            details={"reason": "VersionConflictError"},
        )

    async def _release(
        self, user_id: UUID, references: Sequence[AssetReference], reason: str
    ) -> None:
        """Best-effort destroy; failures are logged and never raised."""
        for reference in references:
            if not reference.asset_id:
                continue
            try:
                await self._asset_store.destroy(reference.asset_id, self._resource_type)
            except Exception as e:
                logger.warning(
                    "avatar_asset_destroy_failed",
                    user_id=str(user_id),
                    asset_id=reference.asset_id,
                    reason=reason,
                    error=str(e),
                )
                continue
            logger.info(
                "avatar_asset_destroyed",
                user_id=str(user_id),
                asset_id=reference.asset_id,
                reason=reason,
            )

    def _public_id_for(self, file: AvatarFile) -> str:
        """Filename stem plus a random suffix, so overwrite never hits a live asset."""
        stem = _PUBLIC_ID_UNSAFE.sub("-", file.stem).strip("-") or "avatar"
        return f"{stem[:64]}-{secrets.token_hex(4)}"
