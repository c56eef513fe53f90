"""JWT authentication provider implementation.

Accepts Supabase-issued access tokens (ES256, verified against the project's
JWKS endpoint) and locally-signed HS256 tokens (used by tests and local
tooling). Only ``sub`` and ``email`` are required claims; the display name is
read from ``user_metadata`` when present.
"""

from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()


class JWKSCache:
    """Lazily fetched ``kid -> key`` map, refetched once on an unknown kid."""

    def __init__(
        self, jwks_url: str, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self._jwks_url = jwks_url
        self._transport = transport
        self._keys: dict[str, Any] | None = None

    async def get(self, kid: str) -> dict[str, Any] | None:
        keys = await self._load()
        if kid not in keys:
            # Key rotation
            self._keys = None
            keys = await self._load()
        return keys.get(kid)

    async def _load(self) -> dict[str, Any]:
        if self._keys is not None:
            return self._keys
        if not self._jwks_url:
            return {}
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(self._jwks_url, timeout=10.0)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("jwks_fetch_failed", url=self._jwks_url, error=str(e))
            return {}
        self._keys = {
            key["kid"]: key for key in response.json().get("keys", []) if key.get("kid")
        }
        logger.info("jwks_fetched", key_count=len(self._keys))
        return self._keys


_jwks = JWKSCache(settings.supabase_jwks_url)


class JWTAuthProvider:
    """JWT-based authentication provider."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        jwks: JWKSCache | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._jwks = jwks or _jwks

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Return the token's user, or None if it is invalid or expired."""
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") == "ES256":
                claims = await self._decode_es256(token, header.get("kid"))
            else:
                claims = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        return self._to_user(claims) if claims else None

    async def _decode_es256(self, token: str, kid: str | None) -> Optional[dict]:
        if not kid:
            return None
        key_data = await self._jwks.get(kid)
        if not key_data:
            logger.warning("jwks_key_not_found", kid=kid)
            return None
        return jwt.decode(
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def _to_user(self, claims: dict[str, Any]) -> Optional[TokenUser]:
        user_id = claims.get("sub")
        email = claims.get("email")
        if not user_id or not email:
            return None
        try:
            parsed_id = UUID(user_id)
        except ValueError:
            return None

        metadata = claims.get("user_metadata") or {}
        return TokenUser(
            id=parsed_id,
            email=email,
            display_name=metadata.get("display_name")
            or metadata.get("full_name")
            or claims.get("name"),
            role=claims.get("role"),
        )

    def create_token(self, user: TokenUser) -> str:
        """Create an HS256 token for ``user`` (tests and local tooling)."""
        payload: dict = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "role": "authenticated",
            "exp": datetime.utcnow() + timedelta(minutes=self._expire_minutes),
            "user_metadata": {"display_name": user.display_name},
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
