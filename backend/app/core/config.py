# backend/app/core/config.py
from pydantic_settings import BaseSettings
from functools import lru_cache


DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    app_name: str = "NGO Platform"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/ngo_platform"

    # Security
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24

    # Session registry
    session_idle_hours: int = 24
    session_cleanup_interval_minutes: int = 60

    # Roles
    admin_role: str = "admin"
    default_role: str = "user"

    # Frontend (comma-separated origins)
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
