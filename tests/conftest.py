"""
tests.conftest

Shared fixtures: per-test SQLite database, app + in-process HTTP client, a stub
Google provider (token endpoint + JWKS) and a fake identity client.
"""

from __future__ import annotations

import json
import time
import uuid
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import parse_qsl

import httpx
import jwt
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from coach_gateway.api.app import create_app
from coach_gateway.api.deps import identity_client_dep
from coach_gateway.auth.models import VerifiedIdentity
from coach_gateway.db.init_db import init_db
from coach_gateway.db.session import create_engine, create_sessionmaker
from coach_gateway.errors import AppError
from coach_gateway.identity.google import GoogleIdentityClient, GoogleOAuthConfig
from coach_gateway.settings import Settings

CLIENT_ID = "test-client.apps.googleusercontent.com"
TOKEN_URL = "https://oauth2.test/token"
JWKS_URL = "https://oauth2.test/certs"
JWT_SECRET = "test-session-secret-0123456789abcdef0123456789"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'gateway.db'}",
        jwt_secret=JWT_SECRET,
        google_client_id=CLIENT_ID,
        google_client_secret="test-client-secret",
        google_token_url=TOKEN_URL,
        google_jwks_url=JWKS_URL,
    )


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


# --- Stub identity provider ---------------------------------------------------


@pytest.fixture(scope="session")
def rsa_keys() -> dict[str, rsa.RSAPrivateKey]:
    return {
        "k1": rsa.generate_private_key(public_exponent=65537, key_size=2048),
        "k2": rsa.generate_private_key(public_exponent=65537, key_size=2048),
    }


class ProviderStub:
    """
    In-memory stand-in for Google's token endpoint and JWKS document.
    """

    def __init__(self, keys: dict[str, rsa.RSAPrivateKey]) -> None:
        self._keys = keys
        self.published_kids: list[str] = ["k1"]
        # auth code -> token endpoint JSON body (or an int status for failures)
        self.codes: dict[str, dict[str, Any] | int] = {}
        self.token_requests: list[dict[str, str]] = []
        self.jwks_requests = 0
        # Served instead of the real key set when set.
        self.jwks_document: Any = None

    def mint_id_token(
        self,
        *,
        sub: str | None = "g-1",
        email: str | None = "a@x.com",
        kid: str = "k1",
        aud: str = CLIENT_ID,
        iss: str = "https://accounts.google.com",
        expires_in: int = 3600,
        **extra: Any,
    ) -> str:
        now = int(time.time())
        claims: dict[str, Any] = {"aud": aud, "iss": iss, "iat": now, "exp": now + expires_in}
        if sub is not None:
            claims["sub"] = sub
        if email is not None:
            claims["email"] = email
        claims.update(extra)
        return jwt.encode(claims, self._keys[kid], algorithm="RS256", headers={"kid": kid})

    def jwks(self) -> dict[str, Any]:
        keys = []
        for kid in self.published_kids:
            jwk = json.loads(RSAAlgorithm.to_jwk(self._keys[kid].public_key()))
            jwk.update({"kid": kid, "alg": "RS256", "use": "sig"})
            keys.append(jwk)
        return {"keys": keys}

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and str(request.url) == TOKEN_URL:
            form = dict(parse_qsl(request.content.decode()))
            self.token_requests.append(form)
            result = self.codes.get(form.get("code", ""), 400)
            if isinstance(result, int):
                return httpx.Response(result, json={"error": "invalid_grant"})
            return httpx.Response(200, json=result)
        if request.method == "GET" and str(request.url) == JWKS_URL:
            self.jwks_requests += 1
            document = self.jwks() if self.jwks_document is None else self.jwks_document
            return httpx.Response(200, json=document)
        return httpx.Response(404)


@pytest.fixture
def provider(rsa_keys) -> ProviderStub:
    return ProviderStub(rsa_keys)


@pytest_asyncio.fixture
async def google_client(provider: ProviderStub) -> AsyncIterator[GoogleIdentityClient]:
    client = GoogleIdentityClient(
        cfg=GoogleOAuthConfig(
            client_id=CLIENT_ID,
            client_secret="test-client-secret",
            token_url=TOKEN_URL,
            jwks_url=JWKS_URL,
        ),
        http=httpx.AsyncClient(transport=httpx.MockTransport(provider.handle)),
    )
    try:
        yield client
    finally:
        await client.aclose()


# --- Fake identity client -----------------------------------------------------


class FakeIdentityClient:
    """
    Accepts any registered code or ID token, including replays.
    """

    def __init__(self) -> None:
        self.codes: dict[str, VerifiedIdentity] = {}
        self.id_tokens: dict[str, VerifiedIdentity] = {}
        self.calls: list[tuple[str, str]] = []

    async def exchange_code(self, code: str) -> VerifiedIdentity:
        self.calls.append(("code", code))
        if code not in self.codes:
            raise AppError.unauthorized("Failed to exchange authorization code")
        return self.codes[code]

    async def verify_token(self, id_token: str) -> VerifiedIdentity:
        self.calls.append(("id_token", id_token))
        if id_token not in self.id_tokens:
            raise AppError.unauthorized("Invalid identity token")
        return self.id_tokens[id_token]


@pytest.fixture
def fake_identity() -> FakeIdentityClient:
    return FakeIdentityClient()


# --- App + HTTP client --------------------------------------------------------


@pytest.fixture
def app(settings: Settings):
    return create_app(settings=settings)


@pytest_asyncio.fixture
async def client(app, fake_identity: FakeIdentityClient) -> AsyncIterator[httpx.AsyncClient]:
    app.dependency_overrides[identity_client_dep] = lambda: fake_identity
    # httpx's ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c


def new_identity(**overrides: Any) -> VerifiedIdentity:
    fields: dict[str, Any] = {
        "provider_id": f"g-{uuid.uuid4().hex[:8]}",
        "email": f"{uuid.uuid4().hex[:8]}@x.com",
        "name": "Ada",
        "avatar_url": "https://img.test/ada.png",
    }
    fields.update(overrides)
    return VerifiedIdentity(**fields)


@pytest.fixture
def make_identity():
    return new_identity
