"""FastAPI application entry point for the PoE gem calculator API."""

import asyncio
import logging
import sys

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from errors import register_error_handlers
from services.cache import DiskCache

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    # Structured logging: JSON for production, human-readable for local
    if settings.is_production:
        logging.basicConfig(
            level=settings.log_level,
            format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
            stream=sys.stdout,
        )
    else:
        logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")


def create_app(
    settings: Settings | None = None,
    cache: DiskCache | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the app and its per-process resources.

    The disk cache is created here so a missing or unwritable cache root
    stops the process before it starts serving. The HTTP client is opened on
    startup (unless one is injected) and closed on shutdown.
    """
    settings = settings or default_settings

    app = FastAPI(title="PoE Gem Calculator API", version="0.1.0")
    app.state.settings = settings
    app.state.cache = cache or DiskCache(settings.cache_dir)
    app.state.http_client = http_client

    # The frontend is served from another origin; it only reads and clears.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )

    hardening = {"X-Content-Type-Options": "nosniff", "X-Frame-Options": "DENY"}
    if settings.is_production:
        hardening["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    @app.middleware("http")
    async def harden_and_tag_responses(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers.update(hardening)
        response.headers["X-Gem-Calculator-Commit"] = settings.git_sha
        if request.url.path.startswith("/api/cache"):
            response.headers["Cache-Control"] = "no-store"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.cache import router as cache_router
    from routes.gems import router as gems_router
    from routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(gems_router)
    app.include_router(cache_router)

    @app.on_event("startup")
    async def _startup() -> None:
        problems = settings.validate()
        if problems:
            logger.warning("Configuration problems: %s", "; ".join(problems))

        try:
            await asyncio.to_thread(app.state.cache.cleanup_expired)
        except OSError as e:
            logger.warning("Failed to cleanup expired cache entries: %s", e)

        if app.state.http_client is None:
            app.state.http_client = httpx.AsyncClient(
                timeout=settings.http_timeout_seconds,
                headers={"User-Agent": settings.user_agent},
                follow_redirects=True,
            )
        logger.info("Cache directory: %s", app.state.cache.root)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        if app.state.http_client is not None:
            await app.state.http_client.aclose()

    return app


configure_logging(default_settings)

app = create_app()
