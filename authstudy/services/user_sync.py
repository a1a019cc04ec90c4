"""Just-in-time user provisioning.

Every authenticated request carries a verified ``sub``. ``reconcile_user`` maps
it onto exactly one ``users`` row: the first sighting inserts it, later ones
advance ``last_login``. Both cases are a single ``INSERT .. ON CONFLICT DO
UPDATE .. RETURNING`` statement, so concurrent first logins for the same
subject still produce one row (the unique constraint on
``external_subject_id`` arbitrates, not application code).

Provisioning is an enrichment, not a gate: storage errors are logged and the
caller gets ``None``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite

from authstudy.core.auth import TokenClaims
from authstudy.core.database import Database
from authstudy.core.logging import get_logger
from authstudy.models.user import User

logger = get_logger(__name__)

UNKNOWN_PROVIDER = "unknown"

_SUBJECT_SEPARATOR = re.compile(r"[|:]")

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass(frozen=True)
class ProfileAttributes:
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None


def extract_provider(subject: str | None) -> str:
    """Return the provider prefix of a subject id.

    >>> extract_provider("google-oauth2|109876")
    'google-oauth2'
    >>> extract_provider("github:42")
    'github'
    >>> extract_provider("nosep")
    'unknown'
    """
    if not subject:
        return UNKNOWN_PROVIDER
    parts = _SUBJECT_SEPARATOR.split(subject, maxsplit=1)
    if len(parts) < 2 or not parts[0]:
        return UNKNOWN_PROVIDER
    return parts[0]


def profile_from_claims(claims: TokenClaims, namespace: str | None = None) -> ProfileAttributes:
    """Pick email/name/picture from standard or namespaced custom claims.

    Access tokens usually only carry these when a login action copies them in
    under ``<namespace>/<claim>``.
    """

    def lookup(name: str) -> str | None:
        value = claims.get(name)
        if value is None and namespace:
            value = claims.get(f"{namespace.rstrip('/')}/{name}")
        return value if isinstance(value, str) and value else None

    return ProfileAttributes(
        email=lookup("email"),
        display_name=lookup("name"),
        avatar_url=lookup("picture"),
    )


def _upsert_statement(
    dialect: str,
    subject: str,
    profile: ProfileAttributes,
    now: datetime,
    refresh_profile: bool,
):
    try:
        insert = _INSERT_BY_DIALECT[dialect]
    except KeyError:
        raise ValueError(f"Upsert not supported for dialect {dialect!r}") from None

    stmt = insert(User).values(
        external_subject_id=subject,
        email=profile.email,
        display_name=profile.display_name,
        avatar_url=profile.avatar_url,
        provider=extract_provider(subject),
        created_at=now,
        last_login=now,
    )
    excluded = stmt.excluded
    # Two racing updates may commit out of order; keep the later timestamp.
    greatest = func.greatest if dialect == "postgresql" else func.max
    updates = {
        "last_login": greatest(
            func.coalesce(User.last_login, excluded.last_login), excluded.last_login
        ),
    }
    if refresh_profile:
        updates.update(
            email=func.coalesce(excluded.email, User.email),
            display_name=func.coalesce(excluded.display_name, User.display_name),
            avatar_url=func.coalesce(excluded.avatar_url, User.avatar_url),
        )
    return (
        stmt.on_conflict_do_update(index_elements=[User.external_subject_id], set_=updates)
        .returning(User)
        .execution_options(populate_existing=True)
    )


async def reconcile_user(
    database: Database,
    claims: TokenClaims | None,
    *,
    namespace: str | None = None,
    refresh_profile: bool = False,
) -> User | None:
    """Create or touch the user row for ``claims.sub``.

    Returns ``None`` when there are no claims or when storage fails.
    """
    if claims is None:
        return None

    subject = claims.sub
    profile = profile_from_claims(claims, namespace)
    now = datetime.now(timezone.utc)

    try:
        stmt = _upsert_statement(database.dialect, subject, profile, now, refresh_profile)
        async with database.session() as session:
            user = (await session.scalars(stmt)).one()
    except Exception:
        logger.exception("User sync failed", sub=subject)
        return None

    if user.created_at == user.last_login:
        logger.info("User created", user_id=user.id, sub=subject, provider=user.provider)
    else:
        logger.debug("User synced", user_id=user.id, sub=subject)
    return user
