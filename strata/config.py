"""
Configuration settings for strata-quiz.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with STRATA_ (e.g. STRATA_CATALOG_PATH).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STRATA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".strata",
        description="Directory for local state",
    )
    state_db_path: Path | None = Field(
        default=None,
        description="SQLite file holding the profile blob (defaults to <data_dir>/state.db)",
    )
    storage_key: str = Field(
        default="kanken6",
        description="Key the profile snapshot is stored under",
    )

    # ========================================
    # Question Bank
    # ========================================
    catalog_path: Path = Field(
        default=Path("data/questions.json"),
        description="JSON array of questions",
    )

    # ========================================
    # Selection
    # ========================================
    random_seed: int | None = Field(
        default=None,
        description="Seed for item selection (unset = nondeterministic)",
    )
    shuffle_seed: int | None = Field(
        default=None,
        description="Seed for presentation order, independent of selection",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="loguru level for the CLI sink",
    )

    @property
    def resolved_db_path(self) -> Path:
        return self.state_db_path or self.data_dir / "state.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
