"""
tests.test_google_identity

Identity exchange against a stubbed Google token endpoint and JWKS.
"""

from __future__ import annotations

import pytest

from coach_gateway.errors import AppError, ErrorKind
from coach_gateway.identity.google import GoogleIdentityClient, GoogleOAuthConfig
from coach_gateway.settings import Settings


@pytest.mark.asyncio
async def test_exchange_code_returns_verified_identity(google_client: GoogleIdentityClient, provider) -> None:
    provider.codes["abc123"] = {
        "access_token": "ya29.test",
        "id_token": provider.mint_id_token(
            sub="g-1", email="a@x.com", name="Ada", picture="https://img.test/ada.png"
        ),
    }

    identity = await google_client.exchange_code("abc123")

    assert identity.provider_id == "g-1"
    assert identity.email == "a@x.com"
    assert identity.name == "Ada"
    assert identity.avatar_url == "https://img.test/ada.png"

    form = provider.token_requests[0]
    assert form["code"] == "abc123"
    assert form["grant_type"] == "authorization_code"
    assert form["client_id"] == "test-client.apps.googleusercontent.com"
    assert form["client_secret"] == "test-client-secret"


@pytest.mark.asyncio
async def test_optional_profile_claims_default_to_none(google_client: GoogleIdentityClient, provider) -> None:
    identity = await google_client.verify_token(provider.mint_id_token())
    assert identity.name is None
    assert identity.avatar_url is None


@pytest.mark.asyncio
async def test_token_response_without_id_token_is_unauthorized(
    google_client: GoogleIdentityClient, provider
) -> None:
    provider.codes["no-id"] = {"access_token": "ya29.test"}

    with pytest.raises(AppError) as info:
        await google_client.exchange_code("no-id")

    assert info.value.kind is ErrorKind.unauthorized
    assert info.value.message == "Failed to get ID token from identity provider"


@pytest.mark.asyncio
async def test_rejected_code_is_unauthorized(google_client: GoogleIdentityClient, provider) -> None:
    provider.codes["used"] = 400

    with pytest.raises(AppError) as info:
        await google_client.exchange_code("used")

    assert info.value.kind is ErrorKind.unauthorized
    assert info.value.status_code == 401


@pytest.mark.asyncio
async def test_provider_outage_is_unauthorized_not_internal(google_client: GoogleIdentityClient, provider) -> None:
    provider.codes["down"] = 503

    with pytest.raises(AppError) as info:
        await google_client.exchange_code("down")

    assert info.value.kind is ErrorKind.unauthorized


@pytest.mark.parametrize(
    "claims",
    [
        {"aud": "someone-else.apps.googleusercontent.com"},
        {"iss": "https://evil.test"},
        {"expires_in": -60},
        {"email": None},
        {"sub": None},
    ],
)
@pytest.mark.asyncio
async def test_invalid_id_tokens_are_unauthorized(
    google_client: GoogleIdentityClient, provider, claims
) -> None:
    with pytest.raises(AppError) as info:
        await google_client.verify_token(provider.mint_id_token(**claims))
    assert info.value.kind is ErrorKind.unauthorized


@pytest.mark.asyncio
async def test_garbage_id_token_is_unauthorized(google_client: GoogleIdentityClient) -> None:
    with pytest.raises(AppError) as info:
        await google_client.verify_token("not-a-jwt")
    assert info.value.kind is ErrorKind.unauthorized


@pytest.mark.asyncio
async def test_jwks_is_cached(google_client: GoogleIdentityClient, provider) -> None:
    await google_client.verify_token(provider.mint_id_token(sub="g-1"))
    await google_client.verify_token(provider.mint_id_token(sub="g-2", email="b@x.com"))
    assert provider.jwks_requests == 1


@pytest.mark.asyncio
async def test_unknown_kid_refetches_jwks_once(google_client: GoogleIdentityClient, provider) -> None:
    await google_client.verify_token(provider.mint_id_token(kid="k1"))
    provider.published_kids.append("k2")

    identity = await google_client.verify_token(provider.mint_id_token(kid="k2", sub="g-2"))

    assert identity.provider_id == "g-2"
    assert provider.jwks_requests == 2


@pytest.mark.asyncio
async def test_unpublished_kid_is_unauthorized(google_client: GoogleIdentityClient, provider) -> None:
    with pytest.raises(AppError) as info:
        await google_client.verify_token(provider.mint_id_token(kid="k2"))
    assert info.value.kind is ErrorKind.unauthorized
    assert provider.jwks_requests == 2


@pytest.mark.parametrize("document", [{"keys": None}, {"keys": 5}, {}, ["not", "a", "dict"]])
@pytest.mark.asyncio
async def test_malformed_jwks_document_is_unauthorized(
    google_client: GoogleIdentityClient, provider, document
) -> None:
    provider.jwks_document = document

    with pytest.raises(AppError) as info:
        await google_client.verify_token(provider.mint_id_token())

    assert info.value.kind is ErrorKind.unauthorized
    assert info.value.message == "Unable to verify identity token"


def test_config_from_settings() -> None:
    settings = Settings(
        google_client_id="cid",
        google_client_secret="csecret",
        google_jwks_cache_seconds=60,
    )
    cfg = GoogleOAuthConfig.from_settings(settings)
    assert cfg.client_id == "cid"
    assert cfg.client_secret == "csecret"
    assert cfg.redirect_uri == ""
    assert cfg.jwks_cache_ttl == 60.0
    assert "https://accounts.google.com" in cfg.issuers
