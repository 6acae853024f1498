"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (logging, database engine).
Middleware, CORS, error handlers and routers are all registered here.

The token codec is built once per app from settings and parked on
app.state, so tests can build an app with their own secret and TTL.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventkeeper import __version__
from eventkeeper.api import api_router
from eventkeeper.api.errors import register_error_handlers
from eventkeeper.auth.jwt import TokenCodec
from eventkeeper.config import Settings, settings as default_settings
from eventkeeper.logger import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    cfg: Settings = app.state.settings
    logger.info(
        "eventkeeper.starting",
        version=__version__,
        environment=cfg.environment,
        port=cfg.port,
        token_ttl_ms=cfg.token_ttl_ms,
    )

    yield

    logger.info("eventkeeper.shutdown")

    from eventkeeper.db.engine import engine
    await engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    cfg = settings or default_settings
    configure_logging(cfg)

    app = FastAPI(
        title="EventKeeper",
        description="Per-user event log with token authentication and ownership checks",
        version=__version__,
        debug=cfg.debug,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.token_codec = TokenCodec.from_settings(cfg)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → SecurityHeaders → handler

    from eventkeeper.middleware.request_id import RequestIdMiddleware
    from eventkeeper.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware, slow_request_ms=cfg.slow_request_ms)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: eventkeeper.main:app)
app = create_app()
