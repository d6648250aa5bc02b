"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="SISCEI_",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = "SISCEI"
    secret_key: str = "change-me"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./siscei.db"

    # Security
    access_token_expire_minutes: int = 60 * 8
    allowed_origins: List[str] = [
        "http://localhost:4200",
        "http://127.0.0.1:4200",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    session_cookie_secure: bool = True

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100

    # Mail
    mail_enabled: bool = False
    mail_sender: str = "no-reply@siscei.local"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_timeout_seconds: float = 10.0

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()


settings = get_settings()
