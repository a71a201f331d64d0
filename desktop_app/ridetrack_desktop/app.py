"""Einstiegspunkt für den Fahrten-Client."""

from __future__ import annotations

import logging
from typing import Optional

from .api_client import StoreClient
from .config import AppConfig, load_config
from .ledger import WeekLedger
from .logging_setup import configure_logging

logger = logging.getLogger(__name__)


def build_ledger(config: AppConfig, client: StoreClient) -> WeekLedger:
    return WeekLedger(client, tz=config.tzinfo())


def main(config: Optional[AppConfig] = None) -> None:
    """Lädt Konfiguration und Wochenstand und protokolliert eine Übersicht."""

    config = config or load_config()
    configure_logging(config.log_level, config.log_json)

    with StoreClient(config.store_url, config.store_key, timeout=config.timeout_seconds) as client:
        ledger = build_ledger(config, client)
        ledger.load()
        taken = [str(entry.key) for entry in ledger.week_entries() if entry.taken]
        logger.info(
            "Week of %s: money=%s rides=%d %s",
            ledger.week_start.isoformat(),
            ledger.money,
            len(taken),
            ", ".join(taken),
        )


if __name__ == "__main__":
    main()


__all__ = ["build_ledger", "main"]
