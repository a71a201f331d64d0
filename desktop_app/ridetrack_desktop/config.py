"""Konfigurations-Utilities für den Fahrten-Client."""

from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

DEFAULT_TIMEOUT = 10.0
DEFAULT_TIMEZONE = "local"
DEFAULT_LOG_LEVEL = "INFO"


class ConfigurationError(RuntimeError):
    """Pflichtwerte fehlen oder sind ungültig."""


@dataclass(slots=True)
class AppConfig:
    """Konfigurationswerte für die Anwendung."""

    store_url: str
    store_key: str
    timeout_seconds: float = DEFAULT_TIMEOUT
    timezone: str = DEFAULT_TIMEZONE
    log_level: str = DEFAULT_LOG_LEVEL
    log_json: bool = False

    def __post_init__(self) -> None:
        if not self.store_url or not self.store_url.strip():
            raise ConfigurationError("RIDETRACK_STORE_URL ist nicht gesetzt")
        if not self.store_key or not self.store_key.strip():
            raise ConfigurationError("RIDETRACK_STORE_KEY ist nicht gesetzt")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("RIDETRACK_TIMEOUT muss positiv sein")

    def tzinfo(self) -> Optional[dt.tzinfo]:
        """Zeitzone für Tagesgrenzen; ``None`` bedeutet Systemzeitzone."""

        if self.timezone in ("", "local"):
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unbekannte Zeitzone: {self.timezone}") from exc


def load_config() -> AppConfig:
    """Lädt die Konfiguration aus der Umgebung und einer optionalen `.env` Datei."""

    env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    raw_timeout = os.getenv("RIDETRACK_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(raw_timeout)
    except ValueError as exc:
        raise ConfigurationError(f"RIDETRACK_TIMEOUT ist keine Zahl: {raw_timeout!r}") from exc

    return AppConfig(
        store_url=os.getenv("RIDETRACK_STORE_URL", ""),
        store_key=os.getenv("RIDETRACK_STORE_KEY", ""),
        timeout_seconds=timeout,
        timezone=os.getenv("RIDETRACK_TZ", DEFAULT_TIMEZONE),
        log_level=os.getenv("RIDETRACK_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        log_json=os.getenv("RIDETRACK_LOG_JSON", "false").lower() == "true",
    )


__all__ = ["AppConfig", "ConfigurationError", "load_config"]
