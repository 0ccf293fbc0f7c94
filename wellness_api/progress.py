"""
Progress summary: focus time, mindful minutes, completed exercises and
active days, folded from the completed rows of the four exercise tables.

Minutes are floor-divided here. The exercise-log statistics in stats.py
round instead; the two are separate call sites and stay that way.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, Mapping, Sequence

from pydantic import BaseModel

from wellness_api.errors import AggregationError, StoreError, ValidationError
from wellness_api.store import Eq, Filter, NotNull, RecordStore, record_value
from wellness_api.timeutil import parse_timestamp, utc_date

logger = logging.getLogger(__name__)


class ProgressSummary(BaseModel):
    focus_time_minutes: int = 0
    mindful_minutes: int = 0
    total_exercises_completed: int = 0
    active_days: int = 0


# group name -> (collection, filters beyond user_id, fields)
PROGRESS_GROUPS: dict[str, tuple[str, tuple[Filter, ...], tuple[str, ...]]] = {
    "binaural sessions": (
        "binaural_sessions",
        (Eq("completed", True),),
        ("actual_duration_seconds", "completed_at"),
    ),
    "deep work sessions": (
        "deep_work_sessions",
        (NotNull("end_time"),),
        ("start_time", "end_time"),
    ),
    "visualization sessions": (
        "visualizations",
        (Eq("completed", True),),
        ("duration_seconds", "completed_at"),
    ),
    "mindfulness logs": (
        "mindfulness_logs",
        (Eq("completed", True),),
        ("duration_seconds", "completed_at"),
    ),
}


def require_user_id(user_id: str | None) -> str:
    if user_id is None or not str(user_id).strip():
        raise ValidationError("User ID is required")
    return str(user_id)


def read_group(
    store: RecordStore,
    group: str,
    collection: str,
    filters: Iterable[Filter] = (),
    *,
    log: logging.Logger | None = None,
    **options,
) -> list[dict]:
    """Run one read; a store failure becomes an AggregationError naming the group."""
    log = log or logger
    try:
        rows = store.query(collection, list(filters), **options)
    except StoreError as e:
        log.error("Error fetching %s: %s", group, e)
        raise AggregationError(group, e) from e
    log.debug("Fetched %d rows for %s", len(rows), group)
    return rows


def _seconds(value) -> int:
    return int(value) if value else 0


def _has_duration(value) -> bool:
    return value is not None and value >= 0


def deep_work_seconds(session) -> int:
    """Whole seconds between start and end; 0 if either is missing or end <= start."""
    start = parse_timestamp(record_value(session, "start_time"))
    end = parse_timestamp(record_value(session, "end_time"))
    if not start or not end:
        return 0
    seconds = math.floor((end - start).total_seconds())
    return seconds if seconds > 0 else 0


def summarize_by_completion_flag(
    binaural: Sequence[Mapping],
    deep_work: Sequence[Mapping],
    visualizations: Sequence[Mapping],
    mindfulness: Sequence[Mapping],
    log: logging.Logger | None = None,
) -> ProgressSummary:
    """
    Fold already-filtered rows into a ProgressSummary.

    Rows are expected to be completed ones only (completed flag set, or a
    deep work end_time present). Null durations count as 0 seconds.
    """
    log = log or logger

    focus_seconds = sum(_seconds(record_value(s, "actual_duration_seconds")) for s in binaural)
    focus_seconds += sum(deep_work_seconds(s) for s in deep_work)

    mindful_seconds = sum(_seconds(record_value(s, "duration_seconds")) for s in visualizations)
    mindful_seconds += sum(_seconds(record_value(s, "duration_seconds")) for s in mindfulness)

    completed = sum(1 for s in binaural if _has_duration(record_value(s, "actual_duration_seconds")))
    completed += len(deep_work)
    completed += sum(1 for s in visualizations if _has_duration(record_value(s, "duration_seconds")))
    completed += sum(1 for s in mindfulness if _has_duration(record_value(s, "duration_seconds")))

    dates = set()
    for s in deep_work:
        dates.add(utc_date(record_value(s, "end_time")))
    for rows in (binaural, visualizations, mindfulness):
        for s in rows:
            dates.add(utc_date(record_value(s, "completed_at")))
    dates.discard(None)

    summary = ProgressSummary(
        focus_time_minutes=focus_seconds // 60,
        mindful_minutes=mindful_seconds // 60,
        total_exercises_completed=completed,
        active_days=len(dates),
    )
    log.debug(
        "Summary calculated: focus=%ss mindful=%ss active dates=%s",
        focus_seconds,
        mindful_seconds,
        sorted(d.isoformat() for d in dates),
    )
    return summary


def fetch_progress_groups(
    store: RecordStore, user_id: str, log: logging.Logger | None = None
) -> dict[str, list[dict]]:
    """Read every group of PROGRESS_GROUPS for one user. First failure aborts."""
    groups = {}
    for group, (collection, filters, fields) in PROGRESS_GROUPS.items():
        groups[group] = read_group(
            store,
            group,
            collection,
            (Eq("user_id", user_id), *filters),
            log=log,
            fields=fields,
        )
    return groups


def get_progress_summary(
    store: RecordStore, user_id: str | None, log: logging.Logger | None = None
) -> ProgressSummary:
    """Progress summary for one user. Raises ValidationError or AggregationError."""
    log = log or logger
    uid = require_user_id(user_id)
    log.debug("Fetching progress for user %s", uid)
    groups = fetch_progress_groups(store, uid, log=log)
    return summarize_by_completion_flag(
        groups["binaural sessions"],
        groups["deep work sessions"],
        groups["visualization sessions"],
        groups["mindfulness logs"],
        log=log,
    )
