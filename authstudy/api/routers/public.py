"""Public router — no token required."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from authstudy.schemas.api import EndpointInfo, PublicMessage, PublicMessageList, PublicOut

router = APIRouter(tags=["public"])


@router.get("/public", response_model=PublicOut)
async def public() -> PublicOut:
    return PublicOut(
        message="This is a public endpoint - no authentication required!",
        timestamp=datetime.now(timezone.utc),
        info=EndpointInfo(
            description="Anyone can access this endpoint without a token.",
            hint="Try accessing /api/protected to see the difference.",
        ),
    )


@router.get("/public/messages", response_model=PublicMessageList)
async def public_messages() -> PublicMessageList:
    return PublicMessageList(
        messages=[
            PublicMessage(id=1, text="Welcome to the Auth0 Study API!"),
            PublicMessage(id=2, text="This endpoint is publicly accessible."),
            PublicMessage(id=3, text="Login to access protected endpoints."),
        ]
    )
