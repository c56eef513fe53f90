"""Cloudinary implementation of the asset store.

The Cloudinary SDK is blocking, so every call runs in a worker thread.
Credentials are passed on each call instead of through the process-wide
``cloudinary.config()``.
"""

import asyncio
import io
from collections.abc import Callable
from typing import Any

import cloudinary.exceptions
import cloudinary.uploader
import structlog

from core.config import settings
from core.exceptions import DependencyError
from domain.entities.asset import AssetReference, AvatarFile, StoreOptions

logger = structlog.get_logger()

# Cloudinary reports a missing asset on destroy as a normal response
_DESTROY_OK_RESULTS = frozenset({"ok", "not found"})


class CloudinaryAssetStore:
    """IAssetStore backed by the Cloudinary upload API."""

    def __init__(
        self,
        cloud_name: str = settings.cloudinary_cloud_name,
        api_key: str = settings.cloudinary_api_key,
        api_secret: str = settings.cloudinary_api_secret,
        upload_prefix: str = settings.cloudinary_upload_prefix,
        timeout: float = settings.cloudinary_timeout_seconds,
    ) -> None:
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._upload_prefix = upload_prefix
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._cloud_name and self._api_key and self._api_secret)

    async def store(self, file: AvatarFile, options: StoreOptions) -> AssetReference:
        """Upload ``file`` and return its secure URL and public id."""
        result = await self._call(
            "upload",
            cloudinary.uploader.upload,
            io.BytesIO(file.content),
            filename=file.filename,
            folder=options.folder,
            public_id=options.public_id,
            overwrite=options.overwrite,
            resource_type=options.resource_type,
        )

        secure_url = result.get("secure_url")
        public_id = result.get("public_id")
        if not secure_url or not public_id:
            raise DependencyError(
                "Object storage returned an incomplete upload response",
                details={"action": "upload"},
            )
        return AssetReference(url=secure_url, asset_id=public_id)

    async def destroy(self, asset_id: str, resource_type: str = "image") -> None:
        """Delete an asset; an asset that is already gone counts as deleted."""
        result = await self._call(
            "destroy",
            cloudinary.uploader.destroy,
            asset_id,
            resource_type=resource_type,
            invalidate=True,
        )

        outcome = result.get("result")
        if outcome not in _DESTROY_OK_RESULTS:
            raise DependencyError(
                "Object storage failed to delete asset",
                details={"action": "destroy", "result": outcome},
            )
        if outcome == "not found":
            logger.info("cloudinary_asset_already_gone", asset_id=asset_id)

    async def _call(
        self, action: str, func: Callable[..., Any], *args: Any, **options: Any
    ) -> dict[str, Any]:
        """Run one SDK call off the event loop, translating failures to DependencyError."""
        if not self.configured:
            raise DependencyError(
                "Object storage is not configured",
                details={"action": action},
            )

        options.update(
            cloud_name=self._cloud_name,
            api_key=self._api_key,
            api_secret=self._api_secret,
            timeout=self._timeout,
        )
        if self._upload_prefix:
            options["upload_prefix"] = self._upload_prefix

        try:
            result = await asyncio.to_thread(func, *args, **options)
        except cloudinary.exceptions.Error as e:
            # SDK messages carry the remote error text, never credentials
            logger.warning(
                "cloudinary_request_failed",
                action=action,
                error_type=type(e).__name__,
                remote_message=str(e),
            )
            raise DependencyError(
                "Object storage request failed",
                details={"action": action, "reason": type(e).__name__, "message": str(e)},
            ) from e

        if not isinstance(result, dict):
            raise DependencyError(
                "Object storage returned an unexpected response",
                details={"action": action},
            )
        return result
