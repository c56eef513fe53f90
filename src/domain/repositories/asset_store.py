"""Asset store protocol for remote object storage."""

from typing import Protocol

from domain.entities.asset import AssetReference, AvatarFile, StoreOptions


class IAssetStore(Protocol):
    """Client interface for the remote object-storage service."""

    async def store(self, file: AvatarFile, options: StoreOptions) -> AssetReference:
        """
        Upload a file and publish it.

        Raises:
            DependencyError: On any transport or validation failure
        """
        ...

    async def destroy(self, asset_id: str, resource_type: str = "image") -> None:
        """Delete an asset. A missing asset is not an error."""
        ...
