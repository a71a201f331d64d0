from __future__ import annotations

import datetime as dt
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from .models import Counter, Ride

logger = logging.getLogger(__name__)

UTC = dt.timezone.utc


def _now() -> dt.datetime:
    return dt.datetime.now(UTC)


def _ensure_utc(value: Optional[dt.datetime]) -> dt.datetime:
    if value is None:
        return _now()
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def get_counter(db: Session, name: str) -> Counter:
    counter = db.get(Counter, name)
    if counter is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Counter not found")
    return counter


def set_counter(db: Session, name: str, value: int, updated_at: Optional[dt.datetime] = None) -> Counter:
    stamp = _ensure_utc(updated_at)
    counter = db.get(Counter, name)
    if counter is None:
        counter = Counter(name=name, value=value, updated_at=stamp)
        db.add(counter)
    else:
        counter.value = value
        counter.updated_at = stamp
    db.commit()
    db.refresh(counter)
    logger.info("Counter %s set to %s", name, value)
    return counter


def _apply_counter_delta(db: Session, name: str, delta: int) -> int:
    # seed a missing counter at 0, then apply the delta in SQL
    db.execute(
        sqlite_insert(Counter)
        .values(name=name, value=0, updated_at=_now())
        .on_conflict_do_nothing(index_elements=[Counter.name])
    )
    db.execute(
        update(Counter)
        .where(Counter.name == name)
        .values(value=Counter.value + delta, updated_at=_now())
    )
    value = db.execute(select(Counter.value).where(Counter.name == name)).scalar_one()
    db.commit()
    logger.info("Counter %s changed by %+d to %s", name, delta, value)
    return value


def increment_counter(db: Session, name: str, amount: int) -> int:
    return _apply_counter_delta(db, name, amount)


def decrement_counter(db: Session, name: str, amount: int) -> int:
    # no floor: the balance may go negative
    return _apply_counter_delta(db, name, -amount)


def list_rides(db: Session, from_date: dt.date, to_date: dt.date) -> List[Ride]:
    if from_date > to_date:
        raise HTTPException(
            status_code=422,
            detail="from_date must not be after to_date",
        )
    return (
        db.query(Ride)
        .filter(Ride.date >= from_date, Ride.date <= to_date)
        .order_by(Ride.date, Ride.time_slot)
        .all()
    )


def upsert_ride(db: Session, day: dt.date, time_slot: str, rides: int) -> Ride:
    statement = sqlite_insert(Ride).values(date=day, time_slot=time_slot, rides=rides, created_at=_now())
    statement = statement.on_conflict_do_update(
        index_elements=[Ride.date, Ride.time_slot],
        set_={"rides": statement.excluded.rides},
    )
    db.execute(statement)
    db.commit()
    return db.query(Ride).filter(Ride.date == day, Ride.time_slot == time_slot).one()


def delete_ride(db: Session, day: dt.date, time_slot: str) -> int:
    deleted = (
        db.query(Ride)
        .filter(Ride.date == day, Ride.time_slot == time_slot)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
