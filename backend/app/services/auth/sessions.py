"""Single-active-session registry.

A user holds at most one valid token. Logging in again replaces the stored
token, which makes every earlier token fail the guard's session check.
"""
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ActiveSession:
    user_id: int
    token: str
    login_time: datetime
    last_activity: datetime


class SessionRegistry(ABC):
    """Abstract interface for session registry implementations."""

    @abstractmethod
    def set_active_session(self, user_id: int, token: str) -> None:
        """Make ``token`` the only valid token for ``user_id``."""
        pass

    @abstractmethod
    def get_active_session(self, user_id: int) -> ActiveSession | None:
        """Get a copy of the user's session, if any."""
        pass

    @abstractmethod
    def is_token_valid(self, user_id: int, token: str) -> bool:
        """Check ``token`` against the user's session and record activity."""
        pass

    @abstractmethod
    def remove_active_session(self, user_id: int) -> None:
        """Drop the user's session unconditionally.

        Callers that act on behalf of a token (logout) must compare it with
        the stored one first.
        """
        pass

    @abstractmethod
    def cleanup_expired_sessions(self) -> list[int]:
        """Evict idle sessions and return the affected user ids."""
        pass

    @abstractmethod
    def active_sessions(self) -> list[ActiveSession]:
        """Snapshot of every session."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class InMemorySessionRegistry(SessionRegistry):
    """Process-local registry keyed by user id.

    Not shared between processes: with several service instances a login on
    one instance does not invalidate tokens held by another.
    """

    def __init__(
        self,
        idle_timeout: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: dict[int, ActiveSession] = {}
        self._lock = threading.Lock()

    def set_active_session(self, user_id: int, token: str) -> None:
        now = self._clock()
        with self._lock:
            replaced = user_id in self._sessions
            self._sessions[user_id] = ActiveSession(
                user_id=user_id,
                token=token,
                login_time=now,
                last_activity=now,
            )
        if replaced:
            logger.info(f"Replaced active session for user {user_id}; previous token invalidated")

    def get_active_session(self, user_id: int) -> ActiveSession | None:
        with self._lock:
            session = self._sessions.get(user_id)
            return replace(session) if session else None

    def is_token_valid(self, user_id: int, token: str) -> bool:
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None or session.token != token:
                return False
            session.last_activity = self._clock()
            return True

    def remove_active_session(self, user_id: int) -> None:
        with self._lock:
            self._sessions.pop(user_id, None)

    def cleanup_expired_sessions(self) -> list[int]:
        cutoff = self._clock() - self.idle_timeout
        with self._lock:
            expired = [
                user_id
                for user_id, session in self._sessions.items()
                if session.last_activity < cutoff
            ]
            for user_id in expired:
                del self._sessions[user_id]
        if expired:
            logger.info(f"Evicted {len(expired)} idle sessions")
        return expired

    def active_sessions(self) -> list[ActiveSession]:
        with self._lock:
            return [replace(session) for session in self._sessions.values()]

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)
