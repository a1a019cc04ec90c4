"""Protected router — every route requires a verified bearer token.

``/protected/profile`` and ``/protected/messages`` also run user sync, so the
caller's local record is provisioned on first access.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from authstudy.api.dependencies import ClaimsDep, SyncedUserDep, sync_user
from authstudy.schemas.api import (
    EndpointInfo,
    ErrorOut,
    PrivateMessage,
    PrivateMessageList,
    ProfileOut,
    ProtectedOut,
    TokenProfile,
)
from authstudy.schemas.user import UserOut

router = APIRouter(
    prefix="/protected",
    tags=["protected"],
    responses={
        400: {"model": ErrorOut, "description": "Malformed Authorization header"},
        401: {"model": ErrorOut, "description": "Missing or invalid bearer token"},
    },
)


@router.get("", response_model=ProtectedOut)
async def protected(claims: ClaimsDep) -> ProtectedOut:
    return ProtectedOut(
        message="You have accessed a protected endpoint!",
        timestamp=datetime.now(timezone.utc),
        token_payload=claims.model_dump(exclude_none=True),
        info=EndpointInfo(
            description="This endpoint requires a valid JWT access token.",
            hint="The token is validated against your Auth0 tenant.",
        ),
    )


@router.get("/profile", response_model=ProfileOut)
async def profile(claims: ClaimsDep, user: SyncedUserDep) -> ProfileOut:
    """Token identity alongside the provisioned database record."""
    return ProfileOut(
        message="User profile from token",
        user=TokenProfile(
            id=claims.sub,
            issuer=claims.iss,
            audience=claims.aud,
            scopes=claims.scopes,
            issued_at=claims.issued_at,
            expires_at=claims.expires_at,
        ),
        db_user=UserOut.model_validate(user) if user is not None else None,
    )


@router.get("/messages", response_model=PrivateMessageList, dependencies=[Depends(sync_user)])
async def messages(claims: ClaimsDep) -> PrivateMessageList:
    return PrivateMessageList(
        messages=[
            PrivateMessage(id=1, text="This is a private message."),
            PrivateMessage(id=2, text="Only authenticated users can see this."),
            PrivateMessage(id=3, text="Your session is secure with Auth0!"),
        ],
        accessed_by=claims.sub,
    )
