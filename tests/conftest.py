"""Shared test fixtures for the wellness API tests.

- In-memory SQLite engine with every table created
- SQLModelStore / MemoryStore over that data
- A store whose reads fail for chosen collections
- FastAPI TestClient bound to the in-memory database
"""

from collections.abc import Generator
from datetime import datetime, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from wellness_api import models  # noqa: F401
from wellness_api.errors import StoreError
from wellness_api.store import MemoryStore, SQLModelStore


# ─────────────────────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────────────────────

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
NOW = datetime(2024, 1, 7, 12, 0, tzinfo=timezone.utc)


def ts(value: str) -> datetime:
    """Parse a compact UTC timestamp like '2024-01-01T10:00'."""
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


class RecordingStore(MemoryStore):
    """MemoryStore that remembers which collections were queried, in order."""

    def __init__(self, data=None):
        super().__init__(data)
        self.queries: list[str] = []

    def query(self, collection, filters=(), **options):
        self.queries.append(collection)
        return super().query(collection, filters, **options)


class FailingStore(RecordingStore):
    """RecordingStore whose operations on the given collections raise StoreError."""

    def __init__(self, failing: set[str], data=None):
        super().__init__(data)
        self.failing = failing

    def query(self, collection, filters=(), **options):
        if collection in self.failing:
            self.queries.append(collection)
            raise StoreError(collection, "permission denied")
        return super().query(collection, filters, **options)

    def insert(self, collection, record):
        if collection in self.failing:
            raise StoreError(collection, "network unreachable")
        return super().insert(collection, record)


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def sql_store(db_session) -> SQLModelStore:
    return SQLModelStore(db_session)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


# ─────────────────────────────────────────────────────────────────────────────
# API Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def client(engine):
    from fastapi.testclient import TestClient

    from wellness_api.db import get_session
    from wellness_api.main import app

    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-User-Id": USER_ID}
