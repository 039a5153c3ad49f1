import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.user import UserStatus

USERNAME_PATTERN = re.compile(r"^[A-Za-zÁÉÍÓÚáéíóúÑñ]{1,15}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\d{8}$")
PASSWORD_PATTERN = re.compile(r"^[A-Za-z0-9]{6,20}$")


class UserRegister(BaseModel):
    username: str
    email: str
    password: str
    full_name: str
    phone: str | None = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        if not USERNAME_PATTERN.match(value):
            raise ValueError("Username must contain only letters and be at most 15 characters")
        return value

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        value = value.strip().lower()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email format")
        return value

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, value: str) -> str:
        value = " ".join(value.split())
        if len(value.split(" ")) < 2:
            raise ValueError("Full name must include at least a first and last name")
        return value

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str | None) -> str | None:
        if value is not None and not PHONE_PATTERN.match(value):
            raise ValueError("Phone number must be exactly 8 digits")
        return value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError("Password must be 6 to 20 letters or digits")
        return value


class LoginRequest(BaseModel):
    """``username`` may also carry an email address."""
    username: str | None = None
    email: str | None = None
    password: str

    @model_validator(mode="after")
    def require_identifier(self):
        if not (self.username or self.email):
            raise ValueError("Username or email is required")
        return self

    @property
    def identifier(self) -> str:
        return (self.username or self.email or "").strip()


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str
    phone: str | None
    status: UserStatus
    roles: list[str]
    created_at: datetime

    @field_validator("roles", mode="before")
    @classmethod
    def role_names(cls, value):
        return [getattr(role, "name", role) for role in value or []]


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


class SessionValidation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    user_id: int = Field(alias="userId")


class ActiveSessionInfo(BaseModel):
    user_id: int
    login_time: datetime
    last_activity: datetime


class ActiveSessionList(BaseModel):
    count: int
    sessions: list[ActiveSessionInfo]


class SessionCleanupResult(BaseModel):
    message: str
    removed: int
    remaining: int
