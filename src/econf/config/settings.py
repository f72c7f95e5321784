"""Configuration management using Pydantic Settings."""

from pathlib import Path
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Document store
    store_backend: str = Field("memory", pattern="^(memory|sqlite)$")
    store_path: Path = Field(Path("data") / "econf.db", description="SQLite file for the sqlite backend")

    # Session verification (tokens are issued by the identity provider)
    session_cookie_name: str = Field("session")
    session_secret: SecretStr = Field(
        SecretStr("dev-session-secret-change-me-in-production"),
        description="HS256 key shared with the identity provider",
    )
    session_algorithm: str = Field("HS256")
    session_max_age_days: int = Field(5, ge=1)

    # Assignment
    reviewers_per_paper: int = Field(2, ge=1)
    rollback_attempts: int = Field(3, ge=1, le=10)

    # The backing store rejects `in` queries with more than ten values
    query_chunk_size: int = Field(10, ge=1, le=10)

    # Logging
    log_level: str = Field("INFO")
    log_format: str = Field("json", pattern="^(json|text)$")

    @field_validator("store_path")
    @classmethod
    def _expand_store_path(cls, v: Path) -> Path:
        return v.expanduser()


# Instantiate global settings
settings = Settings()
