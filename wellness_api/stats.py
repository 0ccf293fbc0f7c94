"""
Statistics over the generic exercise_logs table, plus the combined user
stats shown on the progress screen.

Unlike progress.py, these filter one table by its ``type`` tag and round
seconds to the nearest minute.
"""
from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, Field

from wellness_api.errors import PersistenceError, StoreError, ValidationError
from wellness_api.moods import DEFAULT_TREND, trend
from wellness_api.progress import read_group, require_user_id
from wellness_api.store import Eq, RecordStore, record_value
from wellness_api.timeutil import as_utc, parse_timestamp, start_of_day, utcnow

logger = logging.getLogger(__name__)

FOCUS_TYPES = frozenset({"deep_work", "focus"})
MINDFUL_TYPES = frozenset({"mindfulness", "meditation"})
WEEKLY_PROGRESS_WEEKS = 8
RECENT_MOODS = 7


class UserStats(BaseModel):
    total_exercises: int = 0
    weekly_streak: int = 0
    completed_goals: int = 0
    total_goals: int = 1
    mood_trend: str = DEFAULT_TREND
    focus_time: int = 0
    mindful_minutes: int = 0
    journal_entries: int = 0
    exercise_breakdown: dict[str, int] = Field(default_factory=dict)
    weekly_progress: list[dict] = Field(default_factory=list)


def iso_week_of(value: date | datetime) -> tuple[int, int]:
    """ISO 8601 (year, week) of a date or datetime."""
    if isinstance(value, datetime):
        value = value.date()
    year, week, _ = value.isocalendar()
    return year, week


def round_minutes(seconds: float) -> int:
    """Nearest whole minute, halves rounded up (90s -> 2, 30s -> 1)."""
    return math.floor(seconds / 60 + 0.5)


def weekly_streak(exercises: Sequence[Any] | None, now: datetime | None = None) -> int:
    """
    1 if any exercise was logged after midnight (UTC) seven days ago, else 0.

    This is an "active this week" flag, not a count of consecutive weeks.
    """
    if not exercises:
        return 0
    cutoff = start_of_day(as_utc(now or utcnow())) - timedelta(days=7)
    for ex in exercises:
        created = parse_timestamp(record_value(ex, "created_at"))
        if created and created > cutoff:
            return 1
    return 0


def weekly_progress(exercises: Sequence[Any] | None) -> list[dict]:
    """Exercise counts per ISO week, oldest first, last 8 weeks that have any."""
    counts: Counter = Counter()
    for ex in exercises or []:
        created = parse_timestamp(record_value(ex, "created_at"))
        if created:
            counts[iso_week_of(created)] += 1
    weeks = sorted(counts.items())[-WEEKLY_PROGRESS_WEEKS:]
    return [{"week": f"{year}-W{week:02d}", "count": count} for (year, week), count in weeks]


def exercise_breakdown(exercises: Sequence[Any] | None) -> dict[str, int]:
    return dict(Counter(record_value(ex, "type") for ex in exercises or []))


def _tagged_seconds(exercises: Iterable[Any] | None, types: frozenset) -> int:
    return sum(
        record_value(ex, "duration") or 0
        for ex in exercises or []
        if record_value(ex, "type") in types
    )


def focus_time_from_logs(exercises: Sequence[Any] | None) -> int:
    return round_minutes(_tagged_seconds(exercises, FOCUS_TYPES))


def mindful_minutes_from_logs(exercises: Sequence[Any] | None) -> int:
    return round_minutes(_tagged_seconds(exercises, MINDFUL_TYPES))


def summarize_by_type_tag(
    exercises: Sequence[Any],
    goals: Sequence[Any] = (),
    moods: Sequence[Any] = (),
    journals: Sequence[Any] = (),
    now: datetime | None = None,
) -> UserStats:
    total_goals = len(goals)
    return UserStats(
        total_exercises=len(exercises),
        weekly_streak=weekly_streak(exercises, now=now),
        completed_goals=sum(1 for g in goals if record_value(g, "status") == "completed"),
        total_goals=total_goals if total_goals > 0 else 1,
        mood_trend=trend(moods),
        focus_time=focus_time_from_logs(exercises),
        mindful_minutes=mindful_minutes_from_logs(exercises),
        journal_entries=len(journals),
        exercise_breakdown=exercise_breakdown(exercises),
        weekly_progress=weekly_progress(exercises),
    )


def load_user_stats(
    store: RecordStore,
    user_id: str | None,
    now: datetime | None = None,
    log: logging.Logger | None = None,
) -> UserStats:
    """Read exercise logs, goals, recent moods and journal entries, then summarize."""
    log = log or logger
    uid = require_user_id(user_id)
    owner = Eq("user_id", uid)
    exercises = read_group(store, "exercise logs", "exercise_logs", [owner], log=log)
    goals = read_group(store, "goals", "goals", [owner], log=log)
    moods = read_group(
        store,
        "moods",
        "moods",
        [owner],
        log=log,
        order_by="created_at",
        descending=True,
        limit=RECENT_MOODS,
    )
    journals = read_group(store, "journal entries", "journal_entries", [owner], log=log)
    log.debug(
        "Data fetched: exercises=%d goals=%d moods=%d journals=%d",
        len(exercises),
        len(goals),
        len(moods),
        len(journals),
    )
    return summarize_by_type_tag(exercises, goals, moods, journals, now=now)


def log_exercise(
    store: RecordStore,
    user_id: str | None,
    exercise_type: str,
    duration: int | None = None,
    log: logging.Logger | None = None,
) -> dict:
    """Append one exercise_logs row (duration in seconds)."""
    log = log or logger
    uid = require_user_id(user_id)
    if not exercise_type or not exercise_type.strip():
        raise ValidationError("Exercise type is required")
    try:
        return store.insert(
            "exercise_logs",
            {"user_id": uid, "type": exercise_type.strip(), "duration": duration},
        )
    except StoreError as e:
        log.error("Error logging exercise: %s", e)
        raise PersistenceError("log exercise", e) from e
