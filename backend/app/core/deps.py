# backend/app/core/deps.py
from dataclasses import dataclass, field

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import decode_access_token, resolve_user_id
from app.services.auth.sessions import SessionRegistry

bearer_scheme = HTTPBearer(auto_error=False)

SESSION_INVALIDATED = "SESSION_INVALIDATED"


@dataclass
class CurrentUser:
    """Identity taken from a verified token that is still the user's active session."""
    id: int
    username: str | None
    token: str
    roles: list[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return settings.admin_role in self.roles


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.session_registry


async def get_optional_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


async def get_current_user(
    token: str | None = Depends(get_optional_token),
    registry: SessionRegistry = Depends(get_session_registry),
) -> CurrentUser:
    """Authenticate the bearer token and cross-check it with the session registry."""
    if not token:
        raise UnauthorizedError("No token provided")

    claims = decode_access_token(token)
    if claims is None:
        raise ForbiddenError("Invalid token")

    user_id = resolve_user_id(claims)
    if user_id is None:
        raise ForbiddenError("No user id in token")

    if not registry.is_token_valid(user_id, token):
        raise UnauthorizedError(
            "Session invalidated. Please log in again.",
            details="Your account was signed in from another place or the session expired",
            code=SESSION_INVALIDATED,
        )

    roles = claims.get("roles") or []
    return CurrentUser(
        id=user_id,
        username=claims.get("username"),
        token=token,
        roles=[str(role) for role in roles] if isinstance(roles, list) else [],
    )


async def require_admin(
    user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user
