"""Wochen-Ledger: lokaler Fahrtenstand plus gespiegelter Geldzähler."""

from __future__ import annotations

import datetime as dt
import logging
from threading import Lock, RLock
from typing import Optional, Protocol

from .api_client import NotFoundError, StoreError, StoreTimeout
from .models import (
    MONEY_COUNTER,
    RIDE_UNIT_AMOUNT,
    STATUS_BUSY,
    STATUS_FAILED,
    STATUS_OK,
    STATUS_PARTIAL,
    STATUS_TIMEOUT,
    RideEntry,
    RideRow,
    Slot,
    SyncOutcome,
    ToggleResult,
    WeekWindow,
)
from .week import derive_week_start, local_date, merge_fetched_entries, ride_key

logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    def get_counter(self, name: str) -> int: ...

    def set_counter(self, name: str, value: int, updated_at: Optional[dt.datetime] = None) -> int: ...

    def increment_counter(self, name: str, amount: int) -> int: ...

    def decrement_counter(self, name: str, amount: int) -> int: ...

    def query_rides(self, start: dt.date, end: dt.date) -> list[RideRow]: ...

    def upsert_ride(self, day: dt.date, time_slot: str, rides: int = 1) -> None: ...

    def delete_ride(self, day: dt.date, time_slot: str) -> None: ...


class WeekLedger:
    """Hält den Fahrtenstand aller geladenen Wochen und den Geldstand.

    Der Geldstand wird nie lokal berechnet: nach jeder erfolgreichen Mutation
    übernimmt der Ledger den Rückgabewert des Stores. Mutationen laufen durch
    ein Ein-Platz-Gate; ein zweiter Aufruf während einer laufenden Mutation
    wird mit ``busy`` abgewiesen.
    """

    def __init__(self, store: RemoteStore, *, today: Optional[dt.date | dt.datetime] = None,
                 unit_amount: int = RIDE_UNIT_AMOUNT, counter_name: str = MONEY_COUNTER,
                 tz: Optional[dt.tzinfo] = None) -> None:
        self.store = store
        self.unit_amount = unit_amount
        self.counter_name = counter_name
        self.tz = tz
        reference = today if today is not None else dt.datetime.now(dt.timezone.utc)
        self._week_start = derive_week_start(local_date(reference, tz))
        self._rides: dict[str, int] = {}
        self._money = 0
        self._state_lock = RLock()
        self._gate = Lock()

    # ------------------------------------------------------------------
    # Zustand
    # ------------------------------------------------------------------
    @property
    def week_start(self) -> dt.date:
        with self._state_lock:
            return self._week_start

    @property
    def window(self) -> WeekWindow:
        return WeekWindow(self.week_start)

    @property
    def rides(self) -> dict[str, int]:
        with self._state_lock:
            return dict(self._rides)

    @property
    def money(self) -> int:
        with self._state_lock:
            return self._money

    @property
    def busy(self) -> bool:
        return self._gate.locked()

    def is_taken(self, day_offset: int, slot: Slot | str, week_start: Optional[dt.date] = None) -> bool:
        key = str(ride_key(week_start or self.week_start, day_offset, slot))
        with self._state_lock:
            return self._rides.get(key, 0) > 0

    def week_entries(self) -> list[RideEntry]:
        start = self.week_start
        entries: list[RideEntry] = []
        with self._state_lock:
            for offset in range(7):
                for slot in Slot:
                    key = ride_key(start, offset, slot)
                    entries.append(RideEntry(key=key, taken=self._rides.get(str(key), 0) > 0))
        return entries

    # ------------------------------------------------------------------
    # Laden
    # ------------------------------------------------------------------
    def load(self) -> None:
        self.load_money()
        self.fetch_week()

    def load_money(self) -> int:
        try:
            value = self.store.get_counter(self.counter_name)
        except NotFoundError:
            value = 0
        except StoreError as exc:
            logger.error("Loading counter %s failed: %s", self.counter_name, exc)
            return self.money
        with self._state_lock:
            self._money = value
        return value

    def fetch_week(self, week_start: Optional[dt.date] = None) -> list[RideEntry]:
        start = week_start or self.week_start
        window = WeekWindow(start)
        try:
            rows = self.store.query_rides(window.start, window.end)
        except StoreError as exc:
            logger.error("Loading rides for week %s failed: %s", start.isoformat(), exc)
            return []
        with self._state_lock:
            self._rides = merge_fetched_entries(self._rides, rows)
        return [
            RideEntry(key=ride_key(start, (row.date - start).days, row.time_slot), taken=row.rides > 0)
            for row in rows
            if 0 <= (row.date - start).days <= 6
        ]

    # ------------------------------------------------------------------
    # Mutationen
    # ------------------------------------------------------------------
    def toggle_ride(self, day_offset: int, slot: Slot | str,
                    week_start: Optional[dt.date] = None) -> ToggleResult:
        key = ride_key(week_start or self.week_start, day_offset, slot)
        key_str = str(key)
        with self._state_lock:
            current = self._rides.get(key_str, 0)
        new_rides = 0 if current > 0 else 1
        action = "add" if new_rides else "remove"

        try:
            if new_rides == 0:
                self.store.delete_ride(key.day, key.slot.key)
            else:
                self.store.upsert_ride(key.day, key.slot.key, 1)
        except StoreTimeout as exc:
            logger.error("Timed out %s ride %s: %s", "adding" if new_rides else "removing", key_str, exc)
            return ToggleResult(success=False, action=action, timed_out=True)
        except StoreError as exc:
            logger.error("Error %s ride %s: %s", "adding" if new_rides else "removing", key_str, exc)
            return ToggleResult(success=False, action=action)

        with self._state_lock:
            self._rides = {**self._rides, key_str: new_rides}
        return ToggleResult(success=True, action=action)

    def handle_ride_click(self, day_offset: int, slot: Slot | str) -> SyncOutcome:
        if not self._gate.acquire(blocking=False):
            logger.warning("Ride toggle rejected: another update is in flight")
            return SyncOutcome(STATUS_BUSY)
        try:
            result = self.toggle_ride(day_offset, slot)
            if not result.success:
                status = STATUS_TIMEOUT if result.timed_out else STATUS_FAILED
                return SyncOutcome(status, action=result.action, money=self.money)

            outcome = self._apply_counter_rpc(result.action)
            if outcome.status != STATUS_OK:
                # ride row stays written; money is left as last confirmed by the store
                logger.warning("Ride %s persisted but counter update failed", result.action)
                if outcome.status == STATUS_FAILED:
                    outcome.status = STATUS_PARTIAL
            return outcome
        finally:
            self._gate.release()

    def remove_money(self) -> SyncOutcome:
        if not self._gate.acquire(blocking=False):
            logger.warning("Money removal rejected: another update is in flight")
            return SyncOutcome(STATUS_BUSY)
        try:
            return self._apply_counter_rpc("remove")
        finally:
            self._gate.release()

    def reset_all(self) -> SyncOutcome:
        if not self._gate.acquire(blocking=False):
            logger.warning("Reset rejected: another update is in flight")
            return SyncOutcome(STATUS_BUSY)
        try:
            try:
                self.store.set_counter(self.counter_name, 0, dt.datetime.now(dt.timezone.utc))
            except StoreTimeout as exc:
                logger.error("Timed out resetting counter %s: %s", self.counter_name, exc)
                return SyncOutcome(STATUS_TIMEOUT, money=self.money)
            except StoreError as exc:
                logger.error("Error resetting counter %s: %s", self.counter_name, exc)
                return SyncOutcome(STATUS_FAILED, money=self.money)
            with self._state_lock:
                self._money = 0
            return SyncOutcome(STATUS_OK, money=0)
        finally:
            self._gate.release()

    def navigate_week(self, direction: int) -> dt.date:
        if direction not in (-1, 1):
            raise ValueError(f"direction muss -1 oder 1 sein, nicht {direction}")
        with self._state_lock:
            self._week_start = self._week_start + dt.timedelta(days=7 * direction)
            new_start = self._week_start
        # window already moved; unknown cells read as not taken until the fetch lands
        self.fetch_week(new_start)
        return new_start

    # ------------------------------------------------------------------
    def _apply_counter_rpc(self, action: str) -> SyncOutcome:
        rpc = self.store.increment_counter if action == "add" else self.store.decrement_counter
        try:
            value = rpc(self.counter_name, self.unit_amount)
        except StoreTimeout as exc:
            logger.error("Timed out updating counter %s: %s", self.counter_name, exc)
            return SyncOutcome(STATUS_TIMEOUT, action=action, money=self.money)
        except StoreError as exc:
            logger.error("Error updating counter %s: %s", self.counter_name, exc)
            return SyncOutcome(STATUS_FAILED, action=action, money=self.money)
        with self._state_lock:
            self._money = value
        return SyncOutcome(STATUS_OK, action=action, money=value)


__all__ = ["RemoteStore", "WeekLedger"]
