"""
FastAPI Application Entry Point

This module is the composition root of the service. It configures:
- The redirection limiter shared by all redirect requests
- Database table creation and engine shutdown (lifespan)
- Exception handlers (problem details, slowapi)
- Middleware (access logging, CORS)
- The link creation page and API routes

Design Decisions:
- The limiter is built once at import time and stored on app.state; the
  redirect endpoint reaches it through the get_redirection_limiter
  dependency, which tests replace via app.dependency_overrides
- Settings are read once here; the limiter is never reconfigured at runtime
- API docs are not published in production
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api import endpoints
from app.core.exception_handlers import add_exception_handlers
from app.core.rate_limit import limiter
from app.core.redirection_limiter import RedirectionLimiter
from app.core.setting import EnvSettingsOptions, settings
from app.db.session import dispose_engine, init_models
from app.middleware.logging import add_logging_middleware

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
STATIC_DIR = Path(__file__).resolve().parent / "static"


def build_redirection_limiter() -> RedirectionLimiter:
    """Create the redirection limiter from settings."""
    return RedirectionLimiter(
        max_redirects=settings.REDIRECT_MAX_REDIRECTS,
        window_seconds=settings.REDIRECT_WINDOW_SECONDS,
        shards=settings.REDIRECT_LIMITER_SHARDS,
        eviction_interval_seconds=settings.REDIRECT_EVICTION_INTERVAL_SECONDS or None,
    )


def docs_urls(env: EnvSettingsOptions) -> dict[str, Optional[str]]:
    """Swagger UI and ReDoc paths for an environment (None hides them)."""
    if env == EnvSettingsOptions.production:
        return {"docs_url": None, "redoc_url": None}
    return {"docs_url": "/docs", "redoc_url": "/redoc"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup (unless migrations own the schema), dispose the engine on shutdown."""
    if settings.AUTO_CREATE_TABLES:
        await init_models()
    logger.info(
        f"Starting in {settings.ENV_SETTING.value} mode, redirection limiter: "
        f"{settings.REDIRECT_MAX_REDIRECTS} redirects per "
        f"{settings.REDIRECT_WINDOW_SECONDS}s per key"
    )
    yield
    await dispose_engine()


# Title and description are used in auto-generated API documentation
app = FastAPI(
    title="URL Shortener Service",
    description="URL shortening service with per-link redirection limits",
    version=VERSION,
    lifespan=lifespan,
    **docs_urls(settings.ENV_SETTING),
)

app.state.limiter = limiter
app.state.redirection_limiter = build_redirection_limiter()

app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
add_exception_handlers(app)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


# Page and health endpoints defined before router to match before catch-all route
@app.get("/", include_in_schema=False)
async def index() -> FileResponse:
    """Link creation page."""
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        Service status and version
    """
    return {"status": "healthy", "version": VERSION}


app.include_router(endpoints.router, tags=["URL Shortener"])
