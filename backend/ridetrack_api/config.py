from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="RT_", case_sensitive=False, extra="ignore")
    """Store service runtime configuration."""

    app_name: str = "RideTrack Store"
    host: str = os.getenv("RT_HOST", "127.0.0.1")
    port: int = int(os.getenv("RT_PORT", "8080"))

    storage_backend: str = os.getenv("RT_STORAGE", "sqlite")
    sqlite_path: Path = Path(os.getenv("RT_SQLITE_PATH", "./data/ridetrack.db"))

    api_key: Optional[str] = os.getenv("RT_API_KEY")

    log_level: str = os.getenv("RT_LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("RT_LOG_JSON", "false").lower() == "true"

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


settings = Settings()

settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
