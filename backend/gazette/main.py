from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
from gazette.core.config import settings
from gazette.core.database import engine, Base
from gazette.core.logging_config import (
    setup_logging,
    CorrelationIdMiddleware,
    log_security_event,
)
from gazette.api.outcomes import register_exception_handlers
from gazette.api.endpoints import admin, categories, public, users
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import logging

import gazette.models  # noqa: F401  (register tables on Base.metadata)

setup_logging(logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if settings.ENABLE_HSTS and settings.is_production:
            hsts_value = f"max-age={settings.HSTS_MAX_AGE}"
            if settings.HSTS_INCLUDE_SUBDOMAINS:
                hsts_value += "; includeSubDomains"
            if settings.HSTS_PRELOAD:
                hsts_value += "; preload"
            response.headers["Strict-Transport-Security"] = hsts_value

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "img-src 'self' data:; "
            "style-src 'self' 'unsafe-inline'; "
            "frame-ancestors 'none';"
        )

        return response


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

upload_path = Path(settings.UPLOAD_DIR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"Starting {settings.SITE_NAME}...")

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    upload_path.mkdir(parents=True, exist_ok=True)

    yield

    logger.info(f"Shutting down {settings.SITE_NAME}...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.SITE_NAME,
        description="News and blog content management backend",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationIdMiddleware)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(SecurityHeadersMiddleware)

    # Signed cookie session, holds flash notices
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY,
        same_site=settings.COOKIE_SAMESITE,
        https_only=settings.COOKIE_SECURE,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    # Uploaded photos
    upload_path.mkdir(parents=True, exist_ok=True)
    app.mount(settings.MEDIA_URL, StaticFiles(directory=str(upload_path)), name="media")

    include_routers(app)
    return app


def include_routers(app: FastAPI) -> None:
    app.include_router(admin.router, prefix="/admin", tags=["admin"])
    app.include_router(categories.router, prefix="/admin", tags=["categories"])
    app.include_router(users.router, tags=["users"])
    app.include_router(public.router, tags=["public"])
    # Last: /{category_alias}/{article_alias}_{id} matches any two segments
    app.include_router(public.article_router, tags=["public"])


app = create_app()

log_security_event(
    event_type="app.startup",
    message=f"{settings.SITE_NAME} application starting (production={settings.is_production})",
    event_category="system",
    production=settings.is_production,
    debug=settings.DEBUG,
)
