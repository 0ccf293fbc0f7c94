"""
Mood check-ins: saving a selection, reading the last week back, laying it
out as a 7 day grid, and classifying moods for the trend card.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Sequence

from pydantic import BaseModel, ValidationError as PydanticValidationError

from wellness_api.errors import PersistenceError, StoreError, ValidationError
from wellness_api.progress import require_user_id
from wellness_api.store import Eq, Gte, RecordStore, record_value
from wellness_api.timeutil import as_utc, parse_timestamp, utcnow

logger = logging.getLogger(__name__)

NEUTRAL_COLOR = "#757575"
NEUTRAL_ICON = "help-circle-outline"
NO_DATA_LABEL = "No data"
DEFAULT_TREND = "calm"


class EmotionInfo(NamedTuple):
    label: str
    icon: str
    color: str


class MoodDescriptor(NamedTuple):
    icon: str
    color: str
    description: str


# Emotions offered by the check-in picker
EMOTION_CATALOG: dict[str, EmotionInfo] = {
    "joy": EmotionInfo("Joy", "emoticon-happy", "#FFD700"),
    "peace": EmotionInfo("Peace", "peace", "#90EE90"),
    "gratitude": EmotionInfo("Gratitude", "heart", "#FF69B4"),
    "focus": EmotionInfo("Focus", "target", "#4169E1"),
    "energy": EmotionInfo("Energy", "lightning-bolt", "#FFA500"),
    "calm": EmotionInfo("Calm", "water", "#87CEEB"),
    "motivation": EmotionInfo("Motivation", "rocket", "#9370DB"),
    "confidence": EmotionInfo("Confidence", "shield-star", "#FFB6C1"),
    "clarity": EmotionInfo("Clarity", "lightbulb-on", "#98FB98"),
    "strength": EmotionInfo("Strength", "arm-flex", "#DDA0DD"),
}

# Moods the trend card knows how to describe
MOOD_TREND_CATALOG: dict[str, MoodDescriptor] = {
    "motivated": MoodDescriptor("rocket-launch", "#4CAF50", "Ready to take on challenges"),
    "grateful": MoodDescriptor("heart", "#9C27B0", "Appreciating life's gifts"),
    "calm": MoodDescriptor("water", "#2196F3", "Peaceful and centered"),
    "anxious": MoodDescriptor("alert", "#FFC107", "Feeling uncertain"),
    "overwhelmed": MoodDescriptor("lightning-bolt", "#F44336", "Dealing with too much"),
}

NEUTRAL_DESCRIPTOR = MoodDescriptor(NEUTRAL_ICON, NEUTRAL_COLOR, "Tracking your emotions")


class MoodSelection(BaseModel):
    id: str
    icon: str = ""
    label: str = ""
    color: Optional[str] = None


class WeekDay(BaseModel):
    day: date
    weekday: str
    mood_type: Optional[str] = None
    mood: Optional[dict] = None
    icon: str = NEUTRAL_ICON
    color: str = NEUTRAL_COLOR
    label: str = NO_DATA_LABEL


# --- Classification ---


def resolve(mood_type: Any) -> MoodDescriptor:
    """Descriptor for a mood type; unknown, empty or odd values get the neutral one."""
    try:
        return MOOD_TREND_CATALOG.get(mood_type, NEUTRAL_DESCRIPTOR)
    except TypeError:
        # unhashable input
        return NEUTRAL_DESCRIPTOR


def _mood_type_of(entry: Any) -> Any:
    if isinstance(entry, str):
        return entry
    return record_value(entry, "mood_type")


def trend(moods: Iterable[Any] | None) -> str:
    """Most frequent mood type; ties go to the first one seen. Empty input -> "calm"."""
    types = [t for t in (_mood_type_of(m) for m in (moods or [])) if t]
    if not types:
        return DEFAULT_TREND
    # Counter preserves insertion order, and most_common is stable on ties
    return Counter(types).most_common(1)[0][0]


# --- Persistence ---


def _selection(mood: MoodSelection | Mapping[str, Any] | None) -> MoodSelection:
    if mood is None:
        raise ValidationError("Mood is required")
    if not isinstance(mood, MoodSelection):
        try:
            mood = MoodSelection.model_validate(dict(mood))
        except (PydanticValidationError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid mood payload: {e}") from e
    if not mood.id.strip():
        raise ValidationError("Mood id is required")
    return mood


def save_mood(
    store: RecordStore,
    user_id: str | None,
    mood: MoodSelection | Mapping[str, Any] | None,
    log: logging.Logger | None = None,
) -> dict:
    """Append one mood row for the user. The row gets its timestamp on insert."""
    log = log or logger
    uid = require_user_id(user_id)
    selection = _selection(mood)
    log.debug("Saving mood %s for user %s", selection.id, uid)
    try:
        return store.insert(
            "moods",
            {
                "user_id": uid,
                "mood_type": selection.id,
                "mood_icon": selection.icon,
                "mood_label": selection.label,
                "mood_color": selection.color,
            },
        )
    except StoreError as e:
        log.error("Error saving mood: %s", e)
        raise PersistenceError("save mood", e) from e


def get_week_mood_history(
    store: RecordStore,
    user_id: str | None,
    now: datetime | None = None,
    log: logging.Logger | None = None,
) -> list[dict]:
    """Moods of the last 7 days, newest first."""
    log = log or logger
    uid = require_user_id(user_id)
    since = as_utc(now or utcnow()) - timedelta(days=7)
    log.debug("Fetching week mood history for user %s since %s", uid, since.isoformat())
    try:
        return store.query(
            "moods",
            [Eq("user_id", uid), Gte("created_at", since)],
            order_by="created_at",
            descending=True,
        )
    except StoreError as e:
        log.error("Error fetching mood history: %s", e)
        raise PersistenceError("fetch mood history", e) from e


# --- Week grid ---


def _catalog_field(info: Any, name: str) -> Any:
    if isinstance(info, Mapping):
        return info.get(name)
    return getattr(info, name, None)


def build_week_grid(
    mood_history: Sequence[Any] | None,
    emotion_catalog: Mapping[str, Any] = EMOTION_CATALOG,
    today: date | None = None,
    tz: tzinfo | None = None,
) -> list[WeekDay]:
    """
    Seven days, oldest first and today last, each with at most one mood.

    Days are calendar days in ``tz`` (UTC by default). When a day has several
    check-ins the most recent one is shown, whatever order the history is in.
    """
    tz = tz or timezone.utc
    today = today or datetime.now(tz).date()

    latest: dict[date, tuple[datetime, Any]] = {}
    for entry in mood_history or []:
        created = parse_timestamp(record_value(entry, "created_at"))
        if created is None:
            continue
        day = created.astimezone(tz).date()
        if day not in latest or created > latest[day][0]:
            latest[day] = (created, entry)

    grid = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        slot = WeekDay(day=day, weekday=day.strftime("%a"))
        if day in latest:
            entry = latest[day][1]
            mood_type = record_value(entry, "mood_type")
            slot.mood_type = mood_type
            slot.mood = dict(entry) if isinstance(entry, Mapping) else entry.model_dump()
            info = emotion_catalog.get(mood_type) if mood_type else None
            if info is not None:
                slot.icon = _catalog_field(info, "icon") or NEUTRAL_ICON
                slot.color = _catalog_field(info, "color") or NEUTRAL_COLOR
                slot.label = _catalog_field(info, "label") or mood_type
            else:
                slot.label = record_value(entry, "mood_label") or mood_type or NO_DATA_LABEL
        grid.append(slot)
    return grid
