"""HTTP-Client für den RideTrack Store."""

from __future__ import annotations

import datetime as dt
from typing import Optional
from urllib.parse import urljoin

import requests

from .models import RideRow, format_local_date


class StoreError(RuntimeError):
    """Fehler beim Zugriff auf den Store."""

    def __init__(self, message: str, *, response: Optional[requests.Response] = None) -> None:
        super().__init__(message)
        self.response = response


class TransportError(StoreError):
    """Store nicht erreichbar."""


class StoreTimeout(TransportError):
    """Store hat nicht rechtzeitig geantwortet."""


class NotFoundError(StoreError):
    """Angefragter Datensatz existiert nicht."""


class StoreClient:
    """Kapselt HTTP-Aufrufe zum RideTrack Store."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "StoreClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Hilfsfunktionen
    # ------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    def _request(self, method: str, path: str, **kwargs):
        url = urljoin(self.base_url, path.lstrip("/"))
        kwargs.setdefault("timeout", self.timeout)
        headers = kwargs.setdefault("headers", {})
        headers.update(self._headers())
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.Timeout as exc:
            raise StoreTimeout(f"Zeitüberschreitung bei {method} {path}") from exc
        except requests.RequestException as exc:
            raise TransportError(str(exc)) from exc

        if response.status_code == 404:
            raise NotFoundError(f"Nicht gefunden: {path}", response=response)
        if response.status_code >= 400:
            raise StoreError(f"Store Fehler {response.status_code}: {response.text}", response=response)

        if response.headers.get("Content-Type", "").startswith("application/json"):
            try:
                return response.json()
            except ValueError as exc:
                raise StoreError(f"Ungültige Antwort von {method} {path}", response=response) from exc
        return None

    @staticmethod
    def _as_int(value, path: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise StoreError(f"Kein Ganzzahlwert von {path}: {value!r}")
        return value

    # ------------------------------------------------------------------
    # Zähler
    # ------------------------------------------------------------------
    def get_counter(self, name: str) -> int:
        path = f"/counters/{name}"
        data = self._request("GET", path)
        if not isinstance(data, dict):
            raise StoreError(f"Ungültige Antwort von {path}: {data!r}")
        return self._as_int(data.get("value"), path)

    def set_counter(self, name: str, value: int, updated_at: Optional[dt.datetime] = None) -> int:
        payload = {
            "value": value,
            "updated_at": (updated_at or dt.datetime.now(dt.timezone.utc)).isoformat(),
        }
        path = f"/counters/{name}"
        data = self._request("PUT", path, json=payload)
        if not isinstance(data, dict):
            raise StoreError(f"Ungültige Antwort von {path}: {data!r}")
        return self._as_int(data.get("value"), path)

    def increment_counter(self, name: str, amount: int) -> int:
        data = self._request("POST", "/rpc/increment_counter", json={"counter_name": name, "amount": amount})
        return self._as_int(data, "/rpc/increment_counter")

    def decrement_counter(self, name: str, amount: int) -> int:
        data = self._request("POST", "/rpc/decrement_counter", json={"counter_name": name, "amount": amount})
        return self._as_int(data, "/rpc/decrement_counter")

    # ------------------------------------------------------------------
    # Fahrten
    # ------------------------------------------------------------------
    def query_rides(self, start: dt.date, end: dt.date) -> list[RideRow]:
        params = {"from_date": format_local_date(start), "to_date": format_local_date(end)}
        data = self._request("GET", "/rides", params=params) or []
        try:
            return [
                RideRow(
                    date=dt.date.fromisoformat(item["date"]),
                    time_slot=str(item["time_slot"]).lower(),
                    rides=int(item.get("rides", 0)),
                )
                for item in data
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"Ungültige Fahrtenzeilen von /rides: {exc}") from exc

    def upsert_ride(self, day: dt.date, time_slot: str, rides: int = 1) -> None:
        payload = {"date": format_local_date(day), "time_slot": time_slot, "rides": rides}
        self._request("PUT", "/rides", json=payload)

    def delete_ride(self, day: dt.date, time_slot: str) -> None:
        params = {"date": format_local_date(day), "time_slot": time_slot}
        self._request("DELETE", "/rides", params=params)


__all__ = ["NotFoundError", "StoreClient", "StoreError", "StoreTimeout", "TransportError"]
