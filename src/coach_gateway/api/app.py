"""
coach_gateway.api.app

FastAPI app factory for the gateway.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error handlers.
- Create and dispose shared infrastructure (DB engine, identity client, token service).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial

import httpx
from fastapi import FastAPI

from coach_gateway import __version__
from coach_gateway.api.errors import register_error_handlers, unexpected_error_response
from coach_gateway.api.routers.auth import router as auth_router
from coach_gateway.api.routers.health import router as health_router
from coach_gateway.api.routers.me import router as me_router
from coach_gateway.auth.session_tokens import SessionTokenConfig, SessionTokenService
from coach_gateway.db.init_db import init_db
from coach_gateway.db.session import create_engine, create_sessionmaker
from coach_gateway.identity.google import GoogleIdentityClient, GoogleOAuthConfig
from coach_gateway.observability.logging import configure_logging, get_logger
from coach_gateway.observability.middleware import RequestContextMiddleware
from coach_gateway.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # Secrets and provider credentials are frozen into config structs once here.
        app.state.session_tokens = SessionTokenService(SessionTokenConfig.from_settings(settings))
        app.state.identity_client = GoogleIdentityClient(
            cfg=GoogleOAuthConfig.from_settings(settings),
            http=httpx.AsyncClient(),
        )
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience; production schemas are provisioned separately.
            await init_db(engine)
        try:
            yield
        finally:
            await app.state.identity_client.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Coach Auth Gateway",
        version=__version__,
        docs_url="/docs" if settings.is_dev else None,
        openapi_url="/openapi.json" if settings.is_dev else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        RequestContextMiddleware,
        on_error=partial(unexpected_error_response, dev=settings.is_dev),
    )
    register_error_handlers(app, settings=settings)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(me_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Tests enter `app.router.lifespan_context(app)` explicitly because httpx's
# ASGITransport does not drive the lifespan protocol.
