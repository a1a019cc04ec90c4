"""Bearer token verification against the identity provider's JWKS.

Flow:
    1. The SPA logs in with the identity provider and receives an access token
       whose audience is this API.
    2. Every protected endpoint reads ``Authorization: Bearer <jwt>``.
    3. ``TokenVerifier`` resolves the signing key by ``kid`` from the issuer's
       JWKS (cached, refetched when stale or when an unknown kid shows up) and
       checks signature, expiry, issuer and audience with PyJWT.
    4. The decoded claims are handed to the route as ``TokenClaims``.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Any

import httpx
import jwt
from pydantic import BaseModel, ConfigDict, ValidationError

from authstudy.core.config import Settings
from authstudy.core.errors import AuthError
from authstudy.core.logging import get_logger

logger = get_logger(__name__)


class TokenClaims(BaseModel):
    """Verified claim set. Provider-specific claims are kept as extras."""

    model_config = ConfigDict(extra="allow")

    sub: str
    iss: str | None = None
    aud: str | list[str] | None = None
    scope: str | None = None
    # NumericDate allows fractional seconds
    iat: int | float | None = None
    exp: int | float | None = None

    @property
    def scopes(self) -> list[str]:
        return self.scope.split() if self.scope else []

    @property
    def issued_at(self) -> datetime | None:
        return datetime.fromtimestamp(self.iat, tz=timezone.utc) if self.iat else None

    @property
    def expires_at(self) -> datetime | None:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc) if self.exp else None

    def get(self, key: str, default: Any = None) -> Any:
        """Look up any claim, including namespaced custom ones."""
        return self.model_dump().get(key, default)


class TokenVerifier:
    """Validates RS256 access tokens issued by one tenant for one audience."""

    def __init__(
        self,
        issuer: str,
        audience: str,
        jwks_url: str | None = None,
        *,
        algorithms: tuple[str, ...] | list[str] = ("RS256",),
        leeway: int = 0,
        jwks_cache_seconds: int = 600,
        http_timeout: float = 5.0,
    ) -> None:
        self.issuer = issuer
        self.audience = audience
        self.jwks_url = jwks_url
        self.algorithms = list(algorithms)
        self.leeway = leeway
        self.jwks_cache_seconds = jwks_cache_seconds
        self.http_timeout = http_timeout
        self._keys: dict[str, jwt.PyJWK] = {}
        self._fetched_at: float | None = None
        self._fetch_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenVerifier:
        return cls(
            issuer=settings.issuer_url,
            audience=settings.auth0_audience,
            jwks_url=settings.jwks_url,
            algorithms=settings.jwt_algorithms,
            leeway=settings.jwt_leeway_seconds,
            jwks_cache_seconds=settings.jwks_cache_seconds,
        )

    # ── Key management ───────────────────────────────────────────────────────

    def load_jwks(self, document: dict[str, Any]) -> None:
        """Replace the key cache with the keys of a JWKS document."""
        keyset = jwt.PyJWKSet.from_dict(document)
        self._keys = {key.key_id: key for key in keyset.keys if key.key_id}
        self._fetched_at = time.monotonic()

    def _cache_is_fresh(self) -> bool:
        if self._fetched_at is None:
            return False
        if self.jwks_url is None:
            return True
        return time.monotonic() - self._fetched_at < self.jwks_cache_seconds

    async def _refresh_jwks(self) -> None:
        if self.jwks_url is None:
            return
        async with self._fetch_lock:
            try:
                async with httpx.AsyncClient(timeout=self.http_timeout) as client:
                    resp = await client.get(self.jwks_url)
                    resp.raise_for_status()
                    document = resp.json()
            except httpx.HTTPError as exc:
                logger.error("JWKS fetch failed", url=self.jwks_url, error=str(exc))
                raise AuthError.invalid_token("Unable to retrieve signing keys") from exc
            self.load_jwks(document)
            logger.info("JWKS refreshed", url=self.jwks_url, keys=len(self._keys))

    async def _signing_key(self, kid: str | None) -> jwt.PyJWK:
        if kid is None:
            raise AuthError.invalid_token("Token header has no key id")
        if kid not in self._keys or not self._cache_is_fresh():
            await self._refresh_jwks()
        key = self._keys.get(kid)
        if key is None:
            raise AuthError.invalid_token(f"No signing key found for kid {kid!r}")
        return key

    # ── Verification ─────────────────────────────────────────────────────────

    async def verify(self, token: str) -> TokenClaims:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.DecodeError as exc:
            raise AuthError.invalid_token("Malformed token") from exc

        if header.get("alg") not in self.algorithms:
            raise AuthError.invalid_token(f"Unsupported signing algorithm {header.get('alg')!r}")

        key = await self._signing_key(header.get("kid"))
        try:
            payload = jwt.decode(
                token,
                key.key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": ["sub", "exp", "iss", "aud"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthError.invalid_token("jwt expired") from exc
        except jwt.InvalidAudienceError as exc:
            raise AuthError.invalid_token("jwt audience invalid") from exc
        except jwt.InvalidIssuerError as exc:
            raise AuthError.invalid_token("jwt issuer invalid") from exc
        except jwt.MissingRequiredClaimError as exc:
            raise AuthError.invalid_token(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise AuthError.invalid_token("Invalid token") from exc

        try:
            return TokenClaims.model_validate(payload)
        except ValidationError as exc:
            raise AuthError.invalid_token("Invalid token claims") from exc


def parse_authorization(header: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        raise AuthError.unauthorized()
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError.invalid_request("Authorization header must be 'Bearer <token>'")
    return token.strip()
