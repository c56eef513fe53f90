"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from domain.entities.asset import AssetReference


@dataclass
class Profile:
    """Domain entity for user profile (synced from Supabase)."""

    id: UUID = field(default_factory=uuid4)
    email: str = ""
    display_name: str | None = None
    avatar_url: str | None = None
    avatar_asset_id: str | None = None
    avatar_version: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @property
    def avatar(self) -> AssetReference | None:
        """Current avatar reference, or None when no avatar was ever stored.

        Rows written before asset ids were recorded carry a URL only; those
        still report the URL so reads keep working.
        """
        if self.avatar_url is None and self.avatar_asset_id is None:
            return None
        return AssetReference(url=self.avatar_url, asset_id=self.avatar_asset_id)
