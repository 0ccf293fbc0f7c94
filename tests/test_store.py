"""Tests for wellness_api/store.py

Both stores must agree on filter, ordering and limit semantics; the
SQLModel store turns database failures into StoreError.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from tests.conftest import USER_ID, ts
from wellness_api.errors import StoreError
from wellness_api.models import DeepWorkSession, Mood
from wellness_api.store import Eq, Gte, MemoryStore, NotNull, record_value


@pytest.fixture
def seeded_sql_store(sql_store, db_session):
    db_session.add_all(
        [
            Mood(user_id=USER_ID, mood_type="calm", created_at=ts("2024-01-01T10:00")),
            Mood(user_id=USER_ID, mood_type="joy", created_at=ts("2024-01-03T10:00")),
            Mood(user_id=USER_ID, mood_type="focus", created_at=ts("2024-01-02T10:00")),
            Mood(user_id="someone-else", mood_type="joy", created_at=ts("2024-01-04T10:00")),
        ]
    )
    db_session.commit()
    return sql_store


@pytest.fixture
def seeded_memory_store():
    return MemoryStore(
        {
            "moods": [
                {"user_id": USER_ID, "mood_type": "calm", "created_at": ts("2024-01-01T10:00")},
                {"user_id": USER_ID, "mood_type": "joy", "created_at": ts("2024-01-03T10:00")},
                {"user_id": USER_ID, "mood_type": "focus", "created_at": ts("2024-01-02T10:00")},
                {"user_id": "someone-else", "mood_type": "joy", "created_at": ts("2024-01-04T10:00")},
            ]
        }
    )


@pytest.fixture(params=["sql", "memory"])
def seeded_store(request):
    if request.param == "sql":
        return request.getfixturevalue("seeded_sql_store")
    return request.getfixturevalue("seeded_memory_store")


class TestQuery:
    def test_eq_filter(self, seeded_store):
        rows = seeded_store.query("moods", [Eq("user_id", USER_ID)])

        assert sorted(r["mood_type"] for r in rows) == ["calm", "focus", "joy"]

    def test_gte_order_and_limit(self, seeded_store):
        rows = seeded_store.query(
            "moods",
            [Eq("user_id", USER_ID), Gte("created_at", ts("2024-01-02T00:00"))],
            order_by="created_at",
            descending=True,
            limit=1,
        )

        assert [r["mood_type"] for r in rows] == ["joy"]

    def test_fields_projection(self, seeded_store):
        rows = seeded_store.query(
            "moods", [Eq("mood_type", "calm")], fields=("mood_type", "created_at")
        )

        assert set(rows[0]) == {"mood_type", "created_at"}

    def test_mood_logs_alias(self, seeded_store):
        assert len(seeded_store.query("mood_logs", [Eq("user_id", USER_ID)])) == 3


class TestSQLModelStore:
    def test_not_null_filter(self, sql_store, db_session):
        db_session.add_all(
            [
                DeepWorkSession(user_id=USER_ID, end_time=ts("2024-01-01T10:00")),
                DeepWorkSession(user_id=USER_ID),
            ]
        )
        db_session.commit()

        assert len(sql_store.query("deep_work_sessions", [NotNull("end_time")])) == 1

    def test_unknown_collection(self, sql_store):
        with pytest.raises(StoreError) as exc_info:
            sql_store.query("nope")

        assert exc_info.value.collection == "nope"

    def test_unknown_field(self, sql_store):
        with pytest.raises(StoreError):
            sql_store.query("moods", [Eq("mood", "calm")])

    def test_database_error_becomes_store_error(self, sql_store):
        error = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch.object(sql_store.session, "exec", side_effect=error):
            with pytest.raises(StoreError) as exc_info:
                sql_store.query("moods")

        assert exc_info.value.cause is error

    def test_failed_insert_rolls_back(self, sql_store):
        error = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with (
            patch.object(sql_store.session, "commit", side_effect=error),
            patch.object(sql_store.session, "rollback") as rollback,
        ):
            with pytest.raises(StoreError):
                sql_store.insert("moods", {"user_id": USER_ID, "mood_type": "joy"})

        rollback.assert_called_once()


class TestMemoryStore:
    def test_not_null_filter(self):
        store = MemoryStore({"deep_work_sessions": [{"end_time": None}, {"end_time": ts("2024-01-01T10:00")}]})

        assert len(store.query("deep_work_sessions", [NotNull("end_time")])) == 1

    def test_gte_compares_naive_as_utc(self):
        store = MemoryStore({"moods": [{"created_at": ts("2024-01-02T10:00").replace(tzinfo=None)}]})

        assert len(store.query("moods", [Gte("created_at", ts("2024-01-02T09:00"))])) == 1

    def test_insert_stamps_created_at(self):
        store = MemoryStore()

        row = store.insert("moods", {"mood_type": "joy"})

        assert row["created_at"] is not None


def test_record_value_reads_dicts_and_objects():
    assert record_value({"a": 1}, "a") == 1
    assert record_value(Mood(user_id=USER_ID, mood_type="joy"), "mood_type") == "joy"
    assert record_value({}, "missing", 0) == 0
