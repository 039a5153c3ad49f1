from app.services.auth.sessions import ActiveSession, SessionRegistry, InMemorySessionRegistry
from app.services.auth.cleanup import SessionCleanupScheduler
from app.services.auth.users import UserService, issue_token

__all__ = [
    "ActiveSession",
    "SessionRegistry",
    "InMemorySessionRegistry",
    "SessionCleanupScheduler",
    "UserService",
    "issue_token",
]
