"""Account registration and credential checks."""
import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import ConflictError, UnauthorizedError
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import Role, User, UserStatus
from app.schemas.user import UserRegister

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: int) -> User | None:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_login(self, identifier: str) -> User | None:
        result = await self.session.execute(
            select(User).where(or_(User.username == identifier, User.email == identifier.lower()))
        )
        return result.scalars().first()

    async def register(self, data: UserRegister) -> User:
        result = await self.session.execute(
            select(User.username, User.email).where(
                or_(User.username == data.username, User.email == data.email)
            )
        )
        existing = result.first()
        if existing is not None:
            field = "Username" if existing.username == data.username else "Email"
            raise ConflictError(f"{field} is already registered")

        role_result = await self.session.execute(select(Role).where(Role.name == settings.default_role))
        role = role_result.scalar_one_or_none()
        if role is None:
            role = Role(name=settings.default_role, description="Default role for registered users")
            self.session.add(role)

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            full_name=data.full_name,
            phone=data.phone,
            status=UserStatus.ACTIVE,
            roles=[role],
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        logger.info(f"User {user.id} registered as {data.username}")
        return user

    async def authenticate(self, identifier: str, password: str) -> User:
        user = await self.get_by_login(identifier)
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {identifier}")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if user.status != UserStatus.ACTIVE:
            raise UnauthorizedError("Account is inactive")
        return user


def issue_token(user: User) -> str:
    return create_access_token({
        "userId": user.id,
        "username": user.username,
        "roles": user.role_names,
    })
