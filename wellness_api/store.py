"""
Record store: filtered reads and appends over named collections.

SQLModelStore runs against the database session of the request.
MemoryStore keeps rows in plain lists (handy for scripts and tests).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from wellness_api.errors import StoreError
from wellness_api.models import (
    BinauralSession,
    DeepWorkSession,
    ExerciseLog,
    Goal,
    JournalEntry,
    MindfulnessLog,
    Mood,
    Visualization,
)
from wellness_api.timeutil import as_utc, utcnow

logger = logging.getLogger(__name__)

COLLECTIONS: dict[str, type[SQLModel]] = {
    "binaural_sessions": BinauralSession,
    "deep_work_sessions": DeepWorkSession,
    "visualizations": Visualization,
    "mindfulness_logs": MindfulnessLog,
    "moods": Mood,
    "mood_logs": Mood,
    "exercise_logs": ExerciseLog,
    "goals": Goal,
    "journal_entries": JournalEntry,
}


def record_value(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dict row or from a model instance."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _comparable(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value)
    return value


# --- Filters ---


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any

    def clause(self, column):
        return column == self.value

    def matches(self, record: Mapping) -> bool:
        return record.get(self.field) == self.value


@dataclass(frozen=True)
class Gte:
    field: str
    value: Any

    def clause(self, column):
        return column >= self.value

    def matches(self, record: Mapping) -> bool:
        current = record.get(self.field)
        if current is None:
            return False
        return _comparable(current) >= _comparable(self.value)


@dataclass(frozen=True)
class NotNull:
    field: str

    def clause(self, column):
        return column.is_not(None)

    def matches(self, record: Mapping) -> bool:
        return record.get(self.field) is not None


Filter = Eq | Gte | NotNull


class RecordStore(Protocol):
    def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[dict]:
        ...

    def insert(self, collection: str, record: Mapping[str, Any]) -> dict:
        ...


def _project(row: dict, fields: Sequence[str] | None) -> dict:
    if not fields:
        return row
    return {name: row.get(name) for name in fields}


class SQLModelStore:
    """RecordStore backed by the SQLModel tables in wellness_api.models."""

    def __init__(self, session: Session):
        self.session = session

    def _model(self, collection: str) -> type[SQLModel]:
        model = COLLECTIONS.get(collection)
        if model is None:
            raise StoreError(collection, "unknown collection")
        return model

    def _column(self, collection: str, model: type[SQLModel], name: str):
        if name not in model.model_fields:
            raise StoreError(collection, f"unknown field '{name}'")
        return getattr(model, name)

    def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[dict]:
        model = self._model(collection)
        statement = select(model)
        for f in filters:
            statement = statement.where(f.clause(self._column(collection, model, f.field)))
        if order_by:
            column = self._column(collection, model, order_by)
            statement = statement.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            statement = statement.limit(limit)
        try:
            rows = self.session.exec(statement).all()
        except SQLAlchemyError as e:
            logger.error("Query on %s failed: %s", collection, e)
            raise StoreError(collection, e) from e
        return [_project(row.model_dump(), fields) for row in rows]

    def insert(self, collection: str, record: Mapping[str, Any]) -> dict:
        model = self._model(collection)
        row = model(**dict(record))
        try:
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Insert into %s failed: %s", collection, e)
            raise StoreError(collection, e) from e
        return row.model_dump()


class MemoryStore:
    """In-memory RecordStore. Rows are plain dicts keyed by collection name."""

    def __init__(self, data: Mapping[str, list[dict]] | None = None):
        self.data: dict[str, list[dict]] = {
            name: [dict(row) for row in rows] for name, rows in (data or {}).items()
        }

    def _rows(self, collection: str) -> list[dict]:
        if collection == "mood_logs":
            collection = "moods"
        return self.data.setdefault(collection, [])

    def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[dict]:
        filters = list(filters)
        rows = [row for row in self._rows(collection) if all(f.matches(row) for f in filters)]
        if order_by:
            rows.sort(
                key=lambda row: (row.get(order_by) is None, _comparable(row.get(order_by))),
                reverse=descending,
            )
        if limit is not None:
            rows = rows[:limit]
        return [_project(dict(row), fields) for row in rows]

    def insert(self, collection: str, record: Mapping[str, Any]) -> dict:
        row = dict(record)
        row.setdefault("created_at", utcnow())
        self._rows(collection).append(row)
        return dict(row)
