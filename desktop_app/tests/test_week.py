from __future__ import annotations

import datetime as dt
import os
import time
from zoneinfo import ZoneInfo

import pytest

from ridetrack_desktop.models import RideRow, Slot, WeekWindow, format_local_date
from ridetrack_desktop.week import derive_week_start, key_for, local_date, merge_fetched_entries


def test_week_start_is_monday_within_six_days():
    start = dt.date(2023, 12, 25)
    for offset in range(60):
        day = start + dt.timedelta(days=offset)
        result = derive_week_start(day)
        assert result.weekday() == 0
        assert 0 <= (day - result).days <= 6


def test_sunday_belongs_to_preceding_week():
    sunday = dt.date(2024, 3, 17)
    assert derive_week_start(sunday) == sunday - dt.timedelta(days=6)
    assert derive_week_start(sunday) == dt.date(2024, 3, 11)


def test_monday_is_its_own_week_start(monday):
    assert derive_week_start(monday) == monday


def test_week_start_from_naive_datetime_uses_wall_clock():
    assert derive_week_start(dt.datetime(2024, 3, 17, 23, 59)) == dt.date(2024, 3, 11)


def test_local_date_near_midnight_in_negative_offset():
    # 23:30 on 2024-03-10 in New York is already 2024-03-11 in UTC
    eastern = ZoneInfo("America/New_York")
    instant = dt.datetime(2024, 3, 11, 3, 30, tzinfo=dt.timezone.utc)
    assert local_date(instant, eastern) == dt.date(2024, 3, 10)

    week_start = derive_week_start(instant, eastern)
    assert week_start == dt.date(2024, 3, 4)
    assert key_for(week_start, 6, Slot.EVENING) == "2024-03-10_evening"


def test_key_format_and_slot_spelling(monday):
    assert key_for(monday, 0, Slot.MORNING) == "2024-03-11_morning"
    assert key_for(monday, 6, "Evening") == "2024-03-17_evening"
    assert key_for(monday, 2, "morning") == "2024-03-13_morning"


def test_key_for_crosses_month_and_year():
    assert key_for(dt.date(2024, 12, 30), 3, Slot.MORNING) == "2025-01-02_morning"
    assert key_for(dt.date(2024, 2, 26), 3, Slot.EVENING) == "2024-02-29_evening"


def test_key_for_rejects_bad_input(monday):
    with pytest.raises(ValueError):
        key_for(monday, 7, Slot.MORNING)
    with pytest.raises(ValueError):
        key_for(monday, -1, Slot.MORNING)
    with pytest.raises(ValueError):
        key_for(monday, 0, "noon")


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="requires time.tzset")
@pytest.mark.parametrize("zone", ["UTC", "America/New_York", "Asia/Tokyo", "Pacific/Kiritimati"])
def test_key_for_ignores_machine_timezone(monkeypatch, monday, zone):
    monkeypatch.setenv("TZ", zone)
    time.tzset()
    try:
        assert key_for(monday, 6, Slot.EVENING) == "2024-03-17_evening"
        assert format_local_date(WeekWindow(monday).end) == "2024-03-17"
    finally:
        monkeypatch.delenv("TZ", raising=False)
        time.tzset()


def test_merge_preserves_existing_and_overwrites_fetched():
    existing = {"2024-03-04_morning": 1, "2024-03-11_evening": 1}
    rows = [
        RideRow(date=dt.date(2024, 3, 11), time_slot="evening", rides=0),
        RideRow(date=dt.date(2024, 3, 12), time_slot="morning", rides=1),
    ]
    merged = merge_fetched_entries(existing, rows)
    assert merged == {
        "2024-03-04_morning": 1,
        "2024-03-11_evening": 0,
        "2024-03-12_morning": 1,
    }
    assert existing == {"2024-03-04_morning": 1, "2024-03-11_evening": 1}


def test_merge_is_idempotent():
    existing = {"2024-03-04_morning": 1}
    rows = [RideRow(date=dt.date(2024, 3, 12), time_slot="Morning", rides=1)]
    once = merge_fetched_entries(existing, rows)
    twice = merge_fetched_entries(once, rows)
    assert once == twice
    assert "2024-03-12_morning" in once


def test_week_window_shape(monday):
    window = WeekWindow(monday)
    assert window.end == dt.date(2024, 3, 17)
    assert list(window.days())[-1] == window.end
    assert window.shifted(1).start == dt.date(2024, 3, 18)
    assert window.shifted(-1).start == dt.date(2024, 3, 4)
    with pytest.raises(ValueError):
        WeekWindow(dt.date(2024, 3, 12))
