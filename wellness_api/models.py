from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BinauralSession(SQLModel, table=True):
    __tablename__ = "binaural_sessions"

    id: str = Field(default_factory=_new_id, primary_key=True, index=True)
    user_id: str = Field(index=True)
    frequency: Optional[str] = None
    completed: bool = False
    actual_duration_seconds: Optional[int] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_now)


class DeepWorkSession(SQLModel, table=True):
    __tablename__ = "deep_work_sessions"

    id: str = Field(default_factory=_new_id, primary_key=True, index=True)
    user_id: str = Field(index=True)
    task_title: str = "Focus"
    planned_minutes: Optional[int] = None
    start_time: datetime = Field(default_factory=_now)
    end_time: Optional[datetime] = None
    actual_duration_seconds: Optional[int] = None


class Visualization(SQLModel, table=True):
    __tablename__ = "visualizations"

    id: str = Field(default_factory=_new_id, primary_key=True, index=True)
    user_id: str = Field(index=True)
    visualization_type: Optional[str] = None
    completed: bool = False
    duration_seconds: Optional[int] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_now)


class MindfulnessLog(SQLModel, table=True):
    __tablename__ = "mindfulness_logs"

    id: str = Field(default_factory=_new_id, primary_key=True, index=True)
    user_id: str = Field(index=True)
    mindfulness_type: Optional[str] = None
    completed: bool = False
    duration_seconds: Optional[int] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_now)


class Mood(SQLModel, table=True):
    """One immutable mood check-in."""

    __tablename__ = "moods"

    id: str = Field(default_factory=_new_id, primary_key=True, index=True)
    user_id: str = Field(index=True)
    mood_type: str
    mood_icon: Optional[str] = None
    mood_label: Optional[str] = None
    mood_color: Optional[str] = None
    created_at: datetime = Field(default_factory=_now, index=True)


class ExerciseLog(SQLModel, table=True):
    __tablename__ = "exercise_logs"

    id: str = Field(default_factory=_new_id, primary_key=True, index=True)
    user_id: str = Field(index=True)
    type: str
    duration: Optional[int] = None  # seconds
    created_at: datetime = Field(default_factory=_now)


class Goal(SQLModel, table=True):
    __tablename__ = "goals"

    id: str = Field(default_factory=_new_id, primary_key=True, index=True)
    user_id: str = Field(index=True)
    title: str
    status: str = "active"
    created_at: datetime = Field(default_factory=_now)


class JournalEntry(SQLModel, table=True):
    __tablename__ = "journal_entries"

    id: str = Field(default_factory=_new_id, primary_key=True, index=True)
    user_id: str = Field(index=True)
    content: str = ""
    created_at: datetime = Field(default_factory=_now)
