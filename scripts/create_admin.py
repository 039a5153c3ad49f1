#!/usr/bin/env python3
"""Create an administrator account, or grant the admin role to an existing one."""
import argparse
import asyncio
import getpass
import sys

sys.path.insert(0, "backend")

from sqlalchemy import select  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.database import async_session_factory, engine  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.models.user import Role, User, UserStatus  # noqa: E402


async def create_admin(username: str, email: str, full_name: str, password: str):
    async with async_session_factory() as session:
        result = await session.execute(select(Role).where(Role.name == settings.admin_role))
        role = result.scalar_one_or_none()
        if role is None:
            role = Role(name=settings.admin_role, description="Platform administrator")
            session.add(role)

        result = await session.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                username=username,
                email=email.lower(),
                password_hash=hash_password(password),
                full_name=full_name,
                status=UserStatus.ACTIVE,
                roles=[role],
            )
            session.add(user)
            print(f"Creating admin user {username}")
        elif role not in user.roles:
            user.roles.append(role)
            print(f"Granting admin role to {username}")
        else:
            print(f"{username} is already an administrator")

        await session.commit()
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("username")
    parser.add_argument("email")
    parser.add_argument("full_name")
    args = parser.parse_args()
    password = getpass.getpass("Password: ")
    asyncio.run(create_admin(args.username, args.email, args.full_name, password))
