"""
Application configuration using pydantic-settings.

Every value can be overridden with a ``SAVORLY_``-prefixed environment
variable or from a local ``.env`` file.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SAVORLY_", env_file=".env", extra="ignore"
    )

    database_url: str = "sqlite:///./savorly.db"
    data_dir: Path = Path(".")
    user_data_file: str = "user_data.json"
    accounts_file: str = "saved_accounts.json"
    seed_file: Path = PROJECT_ROOT / "data" / "recipes.json"

    # The original desktop app dropped the database on every launch.
    reset_db_on_start: bool = False
    # Which side wins when a saved snapshot is found at login.
    snapshot_precedence: Literal["snapshot", "database"] = "snapshot"

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def user_data_path(self) -> Path:
        return self.data_dir / self.user_data_file

    @property
    def accounts_path(self) -> Path:
        return self.data_dir / self.accounts_file

    def model_post_init(self, __context) -> None:
        if self.reset_db_on_start:
            logger.warning(
                "SAVORLY_RESET_DB_ON_START is set: the database will be "
                "wiped and reseeded at startup."
            )


settings = Settings()
