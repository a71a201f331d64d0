"""Datenmodelle für den Fahrten-Ledger."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from typing_extensions import Literal

RIDE_UNIT_AMOUNT = 3
MONEY_COUNTER = "money"

ToggleAction = Literal["add", "remove"]

STATUS_OK = "ok"
STATUS_FAILED = "failed"
STATUS_PARTIAL = "partial"
STATUS_BUSY = "busy"
STATUS_TIMEOUT = "timeout"


class Slot(str, Enum):
    """Tageszeitfenster einer Fahrt."""

    MORNING = "Morning"
    EVENING = "Evening"

    @property
    def key(self) -> str:
        return self.value.lower()

    @classmethod
    def parse(cls, value: "Slot | str") -> "Slot":
        if isinstance(value, Slot):
            return value
        normalized = str(value).strip().lower()
        for slot in cls:
            if slot.key == normalized:
                return slot
        raise ValueError(f"Unbekannter Slot: {value!r}")


def format_local_date(day: dt.date) -> str:
    # built from calendar fields, never via a UTC timestamp
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


@dataclass(frozen=True, slots=True)
class RideKey:
    """Identität eines Fahrten-Slots: Kalendertag und Tageszeit."""

    day: dt.date
    slot: Slot

    def __str__(self) -> str:
        return f"{format_local_date(self.day)}_{self.slot.key}"


@dataclass(slots=True)
class RideEntry:
    key: RideKey
    taken: bool = False


@dataclass(slots=True)
class RideRow:
    """Zeile der Tabelle ``rides`` wie sie der Store liefert."""

    date: dt.date
    time_slot: str
    rides: int


@dataclass(frozen=True, slots=True)
class WeekWindow:
    """Montag-bis-Sonntag-Fenster der angezeigten Woche."""

    start: dt.date

    def __post_init__(self) -> None:
        if self.start.weekday() != 0:
            raise ValueError(f"Wochenstart muss ein Montag sein: {self.start.isoformat()}")

    @property
    def end(self) -> dt.date:
        return self.start + dt.timedelta(days=6)

    def days(self) -> Iterator[dt.date]:
        for offset in range(7):
            yield self.start + dt.timedelta(days=offset)

    def shifted(self, direction: int) -> "WeekWindow":
        return WeekWindow(self.start + dt.timedelta(days=7 * direction))


@dataclass(slots=True)
class ToggleResult:
    success: bool
    action: ToggleAction
    timed_out: bool = False


@dataclass(slots=True)
class SyncOutcome:
    """Ergebnis einer gesperrten Mutation (Toggle, Abzug, Reset)."""

    status: str
    action: Optional[ToggleAction] = None
    money: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


__all__ = [
    "MONEY_COUNTER",
    "RIDE_UNIT_AMOUNT",
    "RideEntry",
    "RideKey",
    "RideRow",
    "STATUS_BUSY",
    "STATUS_FAILED",
    "STATUS_OK",
    "STATUS_PARTIAL",
    "STATUS_TIMEOUT",
    "Slot",
    "SyncOutcome",
    "ToggleAction",
    "ToggleResult",
    "WeekWindow",
    "format_local_date",
]
