# runway_ops/main.py
"""
Runway Operations Control - Main Application

Polls current weather for the base location, derives runway status,
honours manual overrides and alerts operations staff when the runway
worsens or weather data goes stale.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .settings import settings
from .db.engine import check_connection, init_db
from .logging import get_logger
from .api import weather_router, runway_router
from .api.deps import get_poller
from .weather.scheduler import start_polling, stop_polling

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Creates missing tables, then starts the weather poller when enabled.
    """
    logger.info("app_starting")

    if not check_connection():
        logger.warning("database_connection_failed")
    else:
        init_db()
        logger.info("database_connection_ok")

    poll_task: Optional[asyncio.Task] = None
    if settings.weather_poller_enabled:
        poll_task = start_polling(get_poller(), settings.weather_poll_interval_seconds)

    yield

    await stop_polling(poll_task)
    logger.info("app_stopped")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add basic security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        # Don't expose server version
        response.headers["Server"] = "Runway Operations Control"
        return response


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="Runway Operations Control",
        description="""
        Runway status derivation for a single-runway operations base.

        Key features:
        - Periodic weather polling with staleness tracking
        - Deterministic runway status rules (OPEN, CAUTION, CLOSED)
        - Manual overrides with audit trail
        - Alert fan-out to pilots and operations staff on worsening status
        - Role-scoped weather views
        """,
        version="0.1.0",
        lifespan=lifespan,
    )

    # In production, set ALLOWED_ORIGINS to specific domains
    allowed_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID", "X-User-Id", "X-User-Role"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(weather_router)
    app.include_router(runway_router)

    @app.get("/health")
    async def health_check():
        """Basic health check."""
        return {"status": "ok", "service": "runway-ops"}

    @app.get("/health/db")
    async def db_health_check():
        """Database health check."""
        if check_connection():
            return {"status": "ok", "database": "connected"}
        raise HTTPException(status_code=503, detail="Database connection failed")

    return app


app = create_app()


def run():
    """Run the server (entry point for CLI)."""
    import uvicorn
    uvicorn.run(
        "runway_ops.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    run()
