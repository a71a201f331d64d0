from __future__ import annotations

import datetime as dt

from fastapi import Depends, FastAPI, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from . import models
from .config import settings
from .database import engine, get_db
from .logging_setup import configure_logging
from .middleware import ApiKeyMiddleware
from .schemas import (
    CounterResponse,
    CounterRpcRequest,
    CounterUpdateRequest,
    RideResponse,
    RideUpsertRequest,
    TimeSlot,
)
from .services import (
    decrement_counter,
    delete_ride,
    get_counter,
    increment_counter,
    list_rides,
    set_counter,
    upsert_ride,
)

configure_logging(settings.log_level, settings.log_json)

models.Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.app_name)
app.state.api_key = settings.api_key
app.add_middleware(ApiKeyMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://127.0.0.1:5173", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/counters/{name}", response_model=CounterResponse)
def read_counter(name: str, db: Session = Depends(get_db)) -> CounterResponse:
    return get_counter(db, name)


@app.put("/counters/{name}", response_model=CounterResponse)
def write_counter(name: str, payload: CounterUpdateRequest, db: Session = Depends(get_db)) -> CounterResponse:
    return set_counter(db, name, payload.value, payload.updated_at)


@app.post("/rpc/increment_counter", response_model=int)
def rpc_increment_counter(payload: CounterRpcRequest, db: Session = Depends(get_db)) -> int:
    return increment_counter(db, payload.counter_name, payload.amount)


@app.post("/rpc/decrement_counter", response_model=int)
def rpc_decrement_counter(payload: CounterRpcRequest, db: Session = Depends(get_db)) -> int:
    return decrement_counter(db, payload.counter_name, payload.amount)


@app.get("/rides", response_model=list[RideResponse])
def read_rides(
    from_date: dt.date = Query(...),
    to_date: dt.date = Query(...),
    db: Session = Depends(get_db),
) -> list[RideResponse]:
    return list_rides(db, from_date, to_date)


@app.put("/rides", response_model=RideResponse)
def write_ride(payload: RideUpsertRequest, db: Session = Depends(get_db)) -> RideResponse:
    return upsert_ride(db, payload.date, payload.time_slot, payload.rides)


@app.delete("/rides", status_code=status.HTTP_204_NO_CONTENT)
def remove_ride(
    date: dt.date = Query(...),
    time_slot: TimeSlot = Query(...),
    db: Session = Depends(get_db),
) -> Response:
    delete_ride(db, date, time_slot)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
