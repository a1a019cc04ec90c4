"""FastAPI dependency providers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from authstudy.core.auth import TokenClaims, TokenVerifier, parse_authorization
from authstudy.core.config import Settings
from authstudy.core.database import Database
from authstudy.core.errors import AuthError
from authstudy.models.user import User
from authstudy.services.user_sync import reconcile_user


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Return the storage handle opened by the app factory."""
    return request.app.state.database


def get_verifier(request: Request) -> TokenVerifier:
    return request.app.state.verifier


async def require_claims(
    request: Request,
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> TokenClaims:
    """Verify the bearer token and expose its claims on ``request.state.claims``."""
    token = parse_authorization(request.headers.get("Authorization"))
    claims = await verifier.verify(token)
    request.state.claims = claims
    return claims


async def sync_user(
    request: Request,
    database: Annotated[Database, Depends(get_database)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    claims: Annotated[TokenClaims, Depends(require_claims)],
) -> User | None:
    """Provision / touch the local user for the verified identity.

    Never rejects the request: the result (possibly ``None``) lands on
    ``request.state.user`` for downstream handlers.
    """
    user = await reconcile_user(
        database,
        claims,
        namespace=settings.auth0_namespace,
        refresh_profile=settings.refresh_profile_on_login,
    )
    request.state.user = user
    return user


def require_scopes(*scopes: str):
    """Dependency factory: 403 unless the token grants every listed scope."""

    async def _check(claims: Annotated[TokenClaims, Depends(require_claims)]) -> TokenClaims:
        missing = [s for s in scopes if s not in claims.scopes]
        if missing:
            raise AuthError.insufficient_scope(f"Missing scope(s): {' '.join(missing)}")
        return claims

    return _check


ClaimsDep = Annotated[TokenClaims, Depends(require_claims)]
SyncedUserDep = Annotated[User | None, Depends(sync_user)]
DatabaseDep = Annotated[Database, Depends(get_database)]
