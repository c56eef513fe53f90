"""Identity resolved from a bearer token."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True)
class TokenUser:
    """The caller behind an access token.

    ``id`` is the token subject and doubles as the primary key of the
    caller's profile row; every avatar operation is scoped to it.
    """

    id: UUID
    email: str
    display_name: str | None = None
    role: str | None = None


class IAuthProvider(Protocol):
    """Verifies access tokens issued by the identity provider."""

    async def validate_token(self, token: str) -> TokenUser | None:
        """Return the token's user, or None when the token is unusable."""
        ...
