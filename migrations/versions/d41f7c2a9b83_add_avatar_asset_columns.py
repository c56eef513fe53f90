"""add_avatar_asset_columns

Revision ID: d41f7c2a9b83
Revises: 6e522fa7b7a8
Create Date: 2026-10-12 09:41:03.552871

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "d41f7c2a9b83"
down_revision: str | Sequence[str] | None = "6e522fa7b7a8"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Record the storage asset id next to the avatar URL, plus a write version."""
    op.add_column(
        "profiles",
        sa.Column("avatar_asset_id", sa.String(length=255), nullable=True),
    )
    op.add_column(
        "profiles",
        sa.Column(
            "avatar_version",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
    )
    # Assets referenced by URL only can never be cleaned up by the service;
    # index the id so an orphan sweep can match storage listings quickly.
    op.create_index(
        "ix_profiles_avatar_asset_id",
        "profiles",
        ["avatar_asset_id"],
        unique=False,
    )


def downgrade() -> None:
    """Drop avatar asset columns."""
    op.drop_index("ix_profiles_avatar_asset_id", table_name="profiles")
    op.drop_column("profiles", "avatar_version")
    op.drop_column("profiles", "avatar_asset_id")
