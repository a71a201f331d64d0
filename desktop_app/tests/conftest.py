from __future__ import annotations

import datetime as dt
from typing import Optional

import pytest

from ridetrack_desktop.api_client import NotFoundError, StoreError
from ridetrack_desktop.models import RideRow


class FakeStore:
    """In-memory store implementing the remote contract, with failure injection."""

    def __init__(self) -> None:
        self.counters: dict[str, int] = {}
        self.rows: dict[tuple[dt.date, str], int] = {}
        self.calls: list[tuple] = []
        self.failures: dict[str, Exception] = {}

    def fail(self, operation: str, exc: Optional[Exception] = None) -> None:
        self.failures[operation] = exc or StoreError(f"{operation} failed")

    def _check(self, operation: str) -> None:
        exc = self.failures.get(operation)
        if exc is not None:
            raise exc

    def get_counter(self, name: str) -> int:
        self.calls.append(("get_counter", name))
        self._check("get_counter")
        if name not in self.counters:
            raise NotFoundError(f"Nicht gefunden: /counters/{name}")
        return self.counters[name]

    def set_counter(self, name: str, value: int, updated_at: Optional[dt.datetime] = None) -> int:
        self.calls.append(("set_counter", name, value))
        self._check("set_counter")
        self.counters[name] = value
        return value

    def increment_counter(self, name: str, amount: int) -> int:
        self.calls.append(("increment_counter", name, amount))
        self._check("increment_counter")
        self.counters[name] = self.counters.get(name, 0) + amount
        return self.counters[name]

    def decrement_counter(self, name: str, amount: int) -> int:
        self.calls.append(("decrement_counter", name, amount))
        self._check("decrement_counter")
        self.counters[name] = self.counters.get(name, 0) - amount
        return self.counters[name]

    def query_rides(self, start: dt.date, end: dt.date) -> list[RideRow]:
        self.calls.append(("query_rides", start, end))
        self._check("query_rides")
        return [
            RideRow(date=day, time_slot=slot, rides=rides)
            for (day, slot), rides in sorted(self.rows.items())
            if start <= day <= end
        ]

    def upsert_ride(self, day: dt.date, time_slot: str, rides: int = 1) -> None:
        self.calls.append(("upsert_ride", day, time_slot, rides))
        self._check("upsert_ride")
        self.rows[(day, time_slot)] = rides

    def delete_ride(self, day: dt.date, time_slot: str) -> None:
        self.calls.append(("delete_ride", day, time_slot))
        self._check("delete_ride")
        self.rows.pop((day, time_slot), None)

    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in {"upsert_ride", "delete_ride"}]


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def monday() -> dt.date:
    return dt.date(2024, 3, 11)
