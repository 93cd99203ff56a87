from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import Tenancy


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "TeamHub"
    environment: str = "development"
    debug: bool = False

    database_dsn: str = "sqlite+aiosqlite:///./teamhub.db"

    jwt_secret: str = "change-me-to-a-long-random-secret-value"
    jwt_expires_hours: int = 24
    min_password_length: int = 6

    # Identity that bootstraps itself as super_admin on first sign-in.
    super_admin_uid: str = "super-admin"
    tenancy: Tenancy = Tenancy.SINGLE

    sentry_dsn: AnyHttpUrl | None = None
    log_level: str = "INFO"

    cors_allow_origins: str = ""

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    @property
    def multi_team(self) -> bool:
        return self.tenancy is Tenancy.MULTI


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
