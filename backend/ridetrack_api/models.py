from __future__ import annotations

import datetime as dt

from sqlalchemy import Column, Date, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


TIME_SLOTS = ("morning", "evening")


class Counter(Base):
    __tablename__ = "counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Ride(Base):
    __tablename__ = "rides"
    # conflict target for upserts
    __table_args__ = (UniqueConstraint("date", "time_slot", name="uq_rides_date_time_slot"),)

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(10), nullable=False)
    rides = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
