from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from typing_extensions import Literal

from pydantic import BaseModel, ConfigDict, Field, model_serializer


def _serialize_datetime(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    else:
        value = value.astimezone(dt.timezone.utc)
    return value.isoformat()


TimeSlot = Literal["morning", "evening"]


class CounterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    name: str
    value: int
    updated_at: dt.datetime

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "updated_at": _serialize_datetime(self.updated_at),
        }


class CounterUpdateRequest(BaseModel):
    value: int
    updated_at: Optional[dt.datetime] = None


class CounterRpcRequest(BaseModel):
    counter_name: str = Field(min_length=1, max_length=50)
    amount: int = Field(gt=0)


class RideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    date: dt.date
    time_slot: TimeSlot
    rides: int


class RideUpsertRequest(BaseModel):
    date: dt.date
    time_slot: TimeSlot
    rides: int = Field(default=1, ge=0, le=1)
