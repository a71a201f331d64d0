from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Generator

os.environ.setdefault("RT_SQLITE_PATH", str(Path(tempfile.gettempdir()) / "ridetrack-tests" / "store.db"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from ridetrack_api import models
from ridetrack_api.database import build_engine, get_db
from ridetrack_api.main import app


@pytest.fixture(scope="session")
def temp_db_path() -> Generator[Path, None, None]:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "test.db"
        yield path


@pytest.fixture(scope="session")
def engine(temp_db_path: Path):
    engine = build_engine(temp_db_path)
    models.Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    SessionTesting = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = SessionTesting()
    try:
        yield session
    finally:
        session.close()
        with engine.begin() as connection:
            for table in reversed(models.Base.metadata.sorted_tables):
                connection.execute(table.delete())


@pytest.fixture(scope="function")
def client(session: Session) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield session

    previous_key = app.state.api_key
    app.state.api_key = None
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.api_key = previous_key
