"""SQLAlchemy implementation of Profile repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import UserNotFoundError, VersionConflictError
from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        stmt = select(ProfileModel).where(ProfileModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def update_avatar(
        self,
        id: UUID,
        avatar_url: str,
        avatar_asset_id: str,
        expected_version: int,
    ) -> Profile:
        """Compare-and-set both avatar fields, bumping the version."""
        stmt = (
            update(ProfileModel)
            .where(
                ProfileModel.id == id,
                ProfileModel.avatar_version == expected_version,
            )
            .values(
                avatar_url=avatar_url,
                avatar_asset_id=avatar_asset_id,
                avatar_version=expected_version + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount == 0:
            # Either the row is gone or another writer got there first
            current = await self.get(id)
            if current is None:
                raise UserNotFoundError(str(id))
            raise VersionConflictError(str(id), expected_version)

        await self._session.flush()
        refreshed = await self._session.execute(
            select(ProfileModel)
            .where(ProfileModel.id == id)
            .execution_options(populate_existing=True)
        )
        return self._to_entity(refreshed.scalar_one())

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            email=model.email,
            display_name=model.display_name,
            avatar_url=model.avatar_url,
            avatar_asset_id=model.avatar_asset_id,
            avatar_version=model.avatar_version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
