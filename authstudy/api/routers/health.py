"""Health router."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from authstudy import __version__
from authstudy.api.dependencies import DatabaseDep
from authstudy.schemas.api import HealthOut

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
async def health(database: DatabaseDep) -> HealthOut:
    """Liveness plus a database round trip; a dead database degrades, never fails."""
    db_ok = await database.ping()
    return HealthOut(
        status="ok" if db_ok else "degraded",
        timestamp=datetime.now(timezone.utc),
        service="auth0-study-api",
        version=__version__,
        database="ok" if db_ok else "unavailable",
    )
