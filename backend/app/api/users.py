# backend/app/api/users.py
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.deps import CurrentUser, get_current_user, get_optional_token, get_session_registry
from app.core.errors import NotFoundError
from app.core.security import decode_access_token, resolve_user_id
from app.schemas.common import MessageResponse
from app.schemas.user import LoginRequest, LoginResponse, SessionValidation, UserRegister, UserResponse
from app.services.auth.sessions import SessionRegistry
from app.services.auth.users import UserService, issue_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Create an account with the default role."""
    user = await UserService(session).register(data)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    session: AsyncSession = Depends(get_session),
    registry: SessionRegistry = Depends(get_session_registry),
) -> LoginResponse:
    """Issue a token and make it the user's only valid session."""
    user = await UserService(session).authenticate(credentials.identifier, credentials.password)
    token = issue_token(user)
    registry.set_active_session(user.id, token)
    logger.info(f"User {user.id} logged in")
    return LoginResponse(
        message="Login successful",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str | None = Depends(get_optional_token),
    registry: SessionRegistry = Depends(get_session_registry),
) -> MessageResponse:
    """End the session, but only when the presented token is the active one.

    A stale token from a replaced session must not log out the newer one.
    """
    if token:
        claims = decode_access_token(token)
        user_id = resolve_user_id(claims) if claims else None
        if user_id is not None:
            active = registry.get_active_session(user_id)
            if active is not None and active.token == token:
                registry.remove_active_session(user_id)
                logger.info(f"User {user_id} logged out")
    return MessageResponse(message="Logout successful")


@router.get("/validate-session", response_model=SessionValidation)
async def validate_session(
    user: CurrentUser = Depends(get_current_user),
) -> SessionValidation:
    return SessionValidation(valid=True, user_id=user.id)


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> UserResponse:
    account = await UserService(session).get(user.id)
    if account is None:
        raise NotFoundError("User not found")
    return UserResponse.model_validate(account)
