# backend/app/core/security.py
import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unknown or malformed hash
        return False


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a JWT carrying ``data``.

    ``iat`` and a random ``jti`` are always added so two logins of the same
    user inside the same second still receive different tokens.
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.access_token_expire_hours))
    to_encode.update({"iat": now, "jti": uuid.uuid4().hex, "exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.JWTError:
        return None


def resolve_user_id(claims: dict) -> int | None:
    """Numeric user id from ``userId``, falling back to the legacy ``id`` claim."""
    for key in ("userId", "id"):
        value = claims.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            return None
    return None
