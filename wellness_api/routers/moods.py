"""
Mood check-ins: save, last week, 7 day grid and trend.
"""
from fastapi import APIRouter, Depends

from wellness_api.deps import current_user_id, get_store, http_error
from wellness_api.errors import WellnessError
from wellness_api.moods import (
    EMOTION_CATALOG,
    MoodSelection,
    WeekDay,
    build_week_grid,
    get_week_mood_history,
    resolve,
    save_mood,
    trend,
)
from wellness_api.store import SQLModelStore

router = APIRouter(prefix="/api/moods", tags=["moods"])


@router.post("")
def create_mood(
    mood: MoodSelection,
    store: SQLModelStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
):
    """Save a mood check-in. Returns the stored row."""
    try:
        return save_mood(store, user_id, mood)
    except WellnessError as e:
        raise http_error(e)


@router.get("/week")
def week_history(
    store: SQLModelStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
):
    """Mood check-ins of the last 7 days (newest first)."""
    try:
        return get_week_mood_history(store, user_id)
    except WellnessError as e:
        raise http_error(e)


@router.get("/week-grid", response_model=list[WeekDay])
def week_grid(
    store: SQLModelStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
):
    """One slot per day for the last 7 days, today last."""
    try:
        history = get_week_mood_history(store, user_id)
    except WellnessError as e:
        raise http_error(e)
    return build_week_grid(history, EMOTION_CATALOG)


@router.get("/trend")
def mood_trend(
    store: SQLModelStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
):
    """Dominant mood of the last week with its icon, color and description."""
    try:
        history = get_week_mood_history(store, user_id)
    except WellnessError as e:
        raise http_error(e)
    current = trend(history)
    descriptor = resolve(current)
    return {"trend": current, **descriptor._asdict()}
