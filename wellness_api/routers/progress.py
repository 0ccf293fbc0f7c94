"""
Progress: summary of completed sessions, exercise log stats, logging an exercise.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from wellness_api.deps import current_user_id, get_store, http_error
from wellness_api.errors import WellnessError
from wellness_api.progress import ProgressSummary, get_progress_summary
from wellness_api.stats import UserStats, load_user_stats, log_exercise
from wellness_api.store import SQLModelStore

router = APIRouter(prefix="/api", tags=["progress"])


class LogExerciseRequest(BaseModel):
    type: str
    duration: int | None = None


@router.get("/progress/summary", response_model=ProgressSummary)
def progress_summary(
    store: SQLModelStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
):
    """Focus time, mindful minutes, completed exercises and active days."""
    try:
        return get_progress_summary(store, user_id)
    except WellnessError as e:
        raise http_error(e)


@router.get("/progress/stats", response_model=UserStats)
def progress_stats(
    store: SQLModelStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
):
    """Streak, breakdown, weekly progress, goals and mood trend from the exercise log."""
    try:
        return load_user_stats(store, user_id)
    except WellnessError as e:
        raise http_error(e)


@router.post("/exercises")
def create_exercise_log(
    req: LogExerciseRequest,
    store: SQLModelStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
):
    try:
        return log_exercise(store, user_id, req.type, req.duration)
    except WellnessError as e:
        raise http_error(e)
