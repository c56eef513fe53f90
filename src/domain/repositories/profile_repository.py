"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        ...

    async def update_avatar(
        self,
        id: UUID,
        avatar_url: str,
        avatar_asset_id: str,
        expected_version: int,
    ) -> Profile:
        """Set both avatar fields if the stored version still matches.

        Raises:
            VersionConflictError: The profile changed since it was read.
            UserNotFoundError: The profile no longer exists.
        """
        ...
