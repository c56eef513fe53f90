"""Remote asset value objects."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AssetReference:
    """Public URL plus the storage handle needed to delete the asset later."""

    url: str | None
    asset_id: str | None


@dataclass(frozen=True, slots=True)
class AvatarFile:
    """An uploaded file, already read into memory."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def stem(self) -> str:
        """Filename without its extension."""
        return self.filename.split(".")[0]


@dataclass(frozen=True, slots=True)
class StoreOptions:
    """Placement options passed to the asset store for one upload."""

    folder: str
    public_id: str
    overwrite: bool = True
    resource_type: str = "image"
