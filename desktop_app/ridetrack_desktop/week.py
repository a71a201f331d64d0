"""Kalenderarithmetik für Wochenfenster und Fahrten-Schlüssel.

Alle Funktionen arbeiten auf lokalen Kalenderdaten. Ein Umweg über
UTC-Zeitstempel würde Daten kurz vor Mitternacht auf den Folge- oder
Vortag verschieben.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Mapping, Optional

from .models import RideKey, RideRow, Slot, format_local_date


def local_date(value: dt.date | dt.datetime, tz: Optional[dt.tzinfo] = None) -> dt.date:
    """Liefert das lokale Kalenderdatum für ``value``.

    Naive Zeitstempel gelten bereits als lokale Wanduhrzeit. Zeitzonenbehaftete
    Zeitstempel werden nach ``tz`` (bzw. in die Systemzeitzone) umgerechnet.
    """

    if isinstance(value, dt.datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz).date()
    return value


def derive_week_start(reference: dt.date | dt.datetime, tz: Optional[dt.tzinfo] = None) -> dt.date:
    """Montag am oder vor ``reference``; Sonntag gehört zur Vorwoche."""

    day = local_date(reference, tz)
    # isoweekday: Monday=1 .. Sunday=7, so Sunday-based weekday is isoweekday % 7
    sunday_based = day.isoweekday() % 7
    return day - dt.timedelta(days=(sunday_based + 6) % 7)


def ride_key(week_start: dt.date, day_offset: int, slot: Slot | str) -> RideKey:
    if not 0 <= day_offset <= 6:
        raise ValueError(f"day_offset muss zwischen 0 und 6 liegen, nicht {day_offset}")
    return RideKey(week_start + dt.timedelta(days=day_offset), Slot.parse(slot))


def key_for(week_start: dt.date, day_offset: int, slot: Slot | str) -> str:
    return str(ride_key(week_start, day_offset, slot))


def _row_key(row: RideRow) -> str:
    day = row.date if isinstance(row.date, dt.date) else dt.date.fromisoformat(str(row.date))
    return f"{format_local_date(day)}_{str(row.time_slot).lower()}"


def merge_fetched_entries(existing: Mapping[str, int], rows: Iterable[RideRow]) -> dict[str, int]:
    """Überlagert ``existing`` mit den geladenen Zeilen, ohne Schlüssel zu verlieren."""

    merged = dict(existing)
    for row in rows:
        merged[_row_key(row)] = int(row.rides)
    return merged


__all__ = [
    "derive_week_start",
    "key_for",
    "local_date",
    "merge_fetched_entries",
    "ride_key",
]
