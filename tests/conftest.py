"""pytest fixtures shared across all tests."""

from __future__ import annotations

import json
import time

import jwt
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from jwt.algorithms import RSAAlgorithm

from authstudy.core.auth import TokenVerifier
from authstudy.core.config import Settings
from authstudy.core.database import Database

KID = "test-key"
AUDIENCE = "https://api.auth0-study.test"
DOMAIN = "test-tenant.auth0.test"
NAMESPACE = "https://auth0-study.test"


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwks(private_key) -> dict:
    jwk = json.loads(RSAAlgorithm.to_jwk(private_key.public_key()))
    jwk.update(kid=KID, alg="RS256", use="sig")
    return {"keys": [jwk]}


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        auth0_domain=DOMAIN,
        auth0_audience=AUDIENCE,
        auth0_namespace=NAMESPACE,
        app_debug=True,
    )


@pytest.fixture
def make_token(private_key, settings):
    """Sign an access token for the test tenant; keyword args override claims."""

    def _make(kid: str = KID, key=None, **claims) -> str:
        now = int(time.time())
        payload = {
            "sub": "google-oauth2|1001",
            "iss": settings.issuer_url,
            "aud": AUDIENCE,
            "iat": now,
            "exp": now + 3600,
            "scope": "openid profile email",
        }
        payload.update(claims)
        payload = {k: v for k, v in payload.items() if v is not None}
        return jwt.encode(
            payload, key or private_key, algorithm="RS256", headers={"kid": kid}
        )

    return _make


@pytest.fixture
def verifier(settings, jwks) -> TokenVerifier:
    """Verifier with a preloaded key set and no JWKS URL (never hits the network)."""
    v = TokenVerifier(issuer=settings.issuer_url, audience=AUDIENCE)
    v.load_jwks(jwks)
    return v


@pytest_asyncio.fixture
async def database(settings):
    """Fresh file-backed SQLite database per test (concurrent writers need a file)."""
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def unreachable_database(tmp_path):
    """Storage handle whose every connection attempt fails."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'test.db'}")
    yield db
    await db.dispose()


def _client(app) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    )


@pytest.fixture
def app(settings, database, verifier):
    from authstudy.api.app import create_app

    return create_app(settings, database=database, verifier=verifier)


@pytest_asyncio.fixture
async def client(app):
    """HTTPX async test client wired to the FastAPI app with a test DB."""
    async with _client(app) as ac:
        yield ac


@pytest_asyncio.fixture
async def offline_client(settings, unreachable_database, verifier):
    """Client for an app whose database is down."""
    from authstudy.api.app import create_app

    app = create_app(settings, database=unreachable_database, verifier=verifier)
    async with _client(app) as ac:
        yield ac
