# backend/app/api/admin.py
import logging

from fastapi import APIRouter, Depends

from app.core.deps import CurrentUser, get_session_registry, require_admin
from app.schemas.user import ActiveSessionInfo, ActiveSessionList, SessionCleanupResult
from app.services.auth.sessions import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/sessions", response_model=ActiveSessionList)
async def list_active_sessions(
    registry: SessionRegistry = Depends(get_session_registry),
    admin: CurrentUser = Depends(require_admin),
) -> ActiveSessionList:
    """Who is signed in. Tokens are never returned."""
    sessions = registry.active_sessions()
    return ActiveSessionList(
        count=len(sessions),
        sessions=[
            ActiveSessionInfo(
                user_id=s.user_id,
                login_time=s.login_time,
                last_activity=s.last_activity,
            )
            for s in sorted(sessions, key=lambda s: s.last_activity, reverse=True)
        ],
    )


@router.post("/sessions/cleanup", response_model=SessionCleanupResult)
async def cleanup_sessions(
    registry: SessionRegistry = Depends(get_session_registry),
    admin: CurrentUser = Depends(require_admin),
) -> SessionCleanupResult:
    removed = registry.cleanup_expired_sessions()
    logger.info(f"Admin {admin.id} ran session cleanup, removed {len(removed)}")
    return SessionCleanupResult(
        message="Expired sessions cleaned up",
        removed=len(removed),
        remaining=registry.count(),
    )
