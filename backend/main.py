"""SIAP CUTI — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from backend.auth.router import router as auth_router
from backend.common.exceptions import register_exception_handlers
from backend.common.rate_limit import limiter
from backend.config import settings
from backend.dashboard.router import router as dashboard_router
from backend.database import engine
from backend.leave.router import router as leave_router
from backend.profiles.router import router as profiles_router
from backend.reports.router import router as reports_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("%s starting (environment=%s)", settings.APP_NAME, settings.ENVIRONMENT)
    if not settings.email_configured:
        logger.warning("Email sender is not configured; status notifications will be skipped.")
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Sistem Informasi Pengajuan Cuti — leave requests, approvals, balances",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(profiles_router, prefix="/api/v1/profiles", tags=["profiles"])
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["reports"])

    return app


app = create_app()
