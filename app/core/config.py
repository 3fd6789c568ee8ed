"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL (async driver)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "tracker_user"
    postgres_password: str = "password"
    postgres_db: str = "application_tracker"
    postgres_driver: str = "asyncpg"

    # Full URL override, e.g. sqlite+aiosqlite:///./tracker.db
    database_url_override: Optional[str] = None

    # Connection pool
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # App
    debug: bool = False
    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        """Construct async database connection URL"""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+{self.postgres_driver}://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
