import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import DEFAULT_SECRET_KEY, Settings, settings
from app.core.errors import register_exception_handlers
from app.core.logging import RequestLoggingMiddleware, configure_logging
from app.api.users import router as users_router
from app.api.activity_tracks import router as activity_tracks_router
from app.api.attendance_records import router as attendance_records_router
from app.api.analytics import router as analytics_router
from app.api.admin import router as admin_router
from app.services.auth.cleanup import SessionCleanupScheduler
from app.services.auth.sessions import InMemorySessionRegistry

logger = logging.getLogger(__name__)

_cleanup_task = None


def validate_production_secrets(config: Settings) -> None:
    """Refuse to start outside development with the development signing key."""
    if config.environment != "development" and config.secret_key == DEFAULT_SECRET_KEY:
        raise RuntimeError(
            "SECRET_KEY must be set in production. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _cleanup_task
    # Startup
    validate_production_secrets(settings)
    scheduler = SessionCleanupScheduler(app.state.session_registry)
    _cleanup_task = asyncio.create_task(scheduler.start())
    yield
    # Shutdown - stop and wait
    scheduler.stop()
    if _cleanup_task:
        try:
            await asyncio.wait_for(_cleanup_task, timeout=10)
        except asyncio.TimeoutError:
            logger.warning("Session cleanup task did not complete in time")


configure_logging(settings.log_level)

app = FastAPI(
    title=settings.app_name,
    description="Attendance and session API for the NGO platform",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.session_registry = InMemorySessionRegistry(
    idle_timeout=timedelta(hours=settings.session_idle_hours),
)

register_exception_handlers(app)

app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users_router, prefix="/api")
app.include_router(activity_tracks_router, prefix="/api")
app.include_router(attendance_records_router, prefix="/api")
app.include_router(analytics_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/health")
async def health_check() -> dict[str, Any]:
    return {
        "status": "healthy",
        "version": "0.1.0",
        "environment": settings.environment,
        "active_sessions": app.state.session_registry.count(),
    }
