"""
coach_gateway.identity.google

Google OAuth2 / OpenID Connect client boundary.

Responsibilities:
- Exchange a server auth code for tokens at Google's token endpoint.
- Verify Google ID tokens (signature via JWKS, exp/iat, audience, issuer).
- Convert verified claims into a `VerifiedIdentity`.

Every provider-side failure is reported as `AppError.unauthorized`: a rejected
code or token is a problem with the caller's input, not a server bug.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import jwt

from coach_gateway.auth.models import VerifiedIdentity
from coach_gateway.errors import AppError
from coach_gateway.observability.logging import get_logger
from coach_gateway.settings import Settings

log = get_logger(__name__)

GOOGLE_ISSUERS: tuple[str, ...] = ("accounts.google.com", "https://accounts.google.com")


class IdentityClient(Protocol):
    async def exchange_code(self, code: str) -> VerifiedIdentity: ...

    async def verify_token(self, id_token: str) -> VerifiedIdentity: ...


@dataclass(frozen=True, slots=True)
class GoogleOAuthConfig:
    client_id: str
    client_secret: str
    redirect_uri: str = ""
    token_url: str = "https://oauth2.googleapis.com/token"
    jwks_url: str = "https://www.googleapis.com/oauth2/v3/certs"
    issuers: tuple[str, ...] = GOOGLE_ISSUERS
    jwks_cache_ttl: float = 3600.0

    @classmethod
    def from_settings(cls, settings: Settings) -> GoogleOAuthConfig:
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_redirect_uri,
            token_url=settings.google_token_url,
            jwks_url=settings.google_jwks_url,
            jwks_cache_ttl=float(settings.google_jwks_cache_seconds),
        )


class GoogleIdentityClient:
    """
    Talks to Google over the supplied `httpx.AsyncClient`.

    No retries and no timeout beyond the client's own configuration.
    """

    def __init__(self, *, cfg: GoogleOAuthConfig, http: httpx.AsyncClient) -> None:
        self._cfg = cfg
        self._http = http
        self._jwks: dict[str, Any] | None = None
        self._jwks_fetched_at: float = 0.0

    async def aclose(self) -> None:
        await self._http.aclose()

    async def exchange_code(self, code: str) -> VerifiedIdentity:
        try:
            r = await self._http.post(
                self._cfg.token_url,
                data={
                    "code": code,
                    "client_id": self._cfg.client_id,
                    "client_secret": self._cfg.client_secret,
                    "redirect_uri": self._cfg.redirect_uri,
                    "grant_type": "authorization_code",
                },
                headers={"Accept": "application/json"},
            )
            r.raise_for_status()
            body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("code_exchange_failed", error=str(e))
            raise AppError.unauthorized("Failed to exchange authorization code") from e

        id_token = body.get("id_token") if isinstance(body, dict) else None
        if not isinstance(id_token, str) or not id_token:
            raise AppError.unauthorized("Failed to get ID token from identity provider")

        return await self.verify_token(id_token)

    async def verify_token(self, id_token: str) -> VerifiedIdentity:
        try:
            key = await self._signing_key(id_token)
            claims = jwt.decode(
                id_token,
                key,
                algorithms=["RS256"],
                audience=self._cfg.client_id,
                options={"require": ["exp", "iat", "iss", "aud"]},
            )
        except jwt.PyJWTError as e:
            log.info("identity_token_rejected", reason=str(e))
            raise AppError.unauthorized("Invalid identity token") from e

        if claims.get("iss") not in self._cfg.issuers:
            log.info("identity_token_rejected", reason="issuer", issuer=claims.get("iss"))
            raise AppError.unauthorized("Invalid identity token")

        return _identity_from_claims(claims)

    async def _signing_key(self, id_token: str) -> Any:
        kid = jwt.get_unverified_header(id_token).get("kid")
        if not kid:
            raise jwt.InvalidTokenError("Identity token has no key id")

        jwk = _find_key(await self._get_jwks(), kid)
        if jwk is None:
            # Google rotates keys; refetch once before giving up.
            jwk = _find_key(await self._get_jwks(force=True), kid)
        if jwk is None:
            raise jwt.InvalidTokenError(f"Unknown signing key: {kid}")
        return jwt.PyJWK(jwk, algorithm="RS256").key

    async def _get_jwks(self, *, force: bool = False) -> dict[str, Any]:
        now = time.monotonic()
        if (
            not force
            and self._jwks is not None
            and now - self._jwks_fetched_at < self._cfg.jwks_cache_ttl
        ):
            return self._jwks

        try:
            r = await self._http.get(self._cfg.jwks_url)
            r.raise_for_status()
            jwks = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("jwks_fetch_failed", error=str(e))
            raise AppError.unauthorized("Unable to verify identity token") from e

        if not isinstance(jwks, dict) or not isinstance(jwks.get("keys"), list):
            log.warning("jwks_malformed")
            raise AppError.unauthorized("Unable to verify identity token")

        self._jwks = jwks
        self._jwks_fetched_at = now
        log.info("jwks_refreshed", keys_count=len(jwks["keys"]))
        return jwks


def _find_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
    for key in jwks["keys"]:
        if isinstance(key, dict) and key.get("kid") == kid:
            return key
    return None


def _identity_from_claims(claims: dict[str, Any]) -> VerifiedIdentity:
    sub = claims.get("sub")
    email = claims.get("email")
    if not isinstance(sub, str) or not sub or not isinstance(email, str) or not email:
        raise AppError.unauthorized("Invalid identity token payload")

    # Optional profile claims default to None when absent.
    name = claims.get("name")
    picture = claims.get("picture")
    return VerifiedIdentity(
        provider_id=sub,
        email=email,
        name=name if isinstance(name, str) else None,
        avatar_url=picture if isinstance(picture, str) else None,
    )


# --- Module Notes -----------------------------------------------------------
# The JWKS cache is per-client instance; one client is created at app startup.
# Hardening gap: no explicit timeout/cancellation policy for provider calls.
