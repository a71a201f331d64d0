from __future__ import annotations

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import settings

if settings.storage_backend != "sqlite":
    raise NotImplementedError("Only the sqlite backend is implemented")


def build_engine(sqlite_path) -> Engine:
    # sessions are handed across FastAPI's worker threads
    return create_engine(
        f"sqlite:///{sqlite_path}",
        connect_args={"check_same_thread": False},
        future=True,
    )


engine = build_engine(settings.sqlite_path)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
