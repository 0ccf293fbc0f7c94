"""
Deep work sessions: start a session, end it, list recent ones.
Ended sessions feed the focus time of the progress summary.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from wellness_api.db import get_session
from wellness_api.deps import current_user_id
from wellness_api.models import DeepWorkSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sessions"])


class StartSessionRequest(BaseModel):
    task_title: str
    planned_minutes: int | None = None


class EndSessionRequest(BaseModel):
    actual_duration_seconds: int | None = None


@router.post("/sessions")
def start_session(
    req: StartSessionRequest,
    db: Session = Depends(get_session),
    user_id: str = Depends(current_user_id),
):
    """Start a deep work session. Returns the new session with id and start_time."""
    session = DeepWorkSession(
        user_id=user_id,
        task_title=req.task_title.strip() or "Focus",
        planned_minutes=req.planned_minutes,
        start_time=datetime.now(timezone.utc),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


@router.patch("/sessions/{session_id}")
def end_session(
    session_id: str,
    req: EndSessionRequest | None = None,
    db: Session = Depends(get_session),
    user_id: str = Depends(current_user_id),
):
    """
    End a deep work session. Sets end_time to now.
    actual_duration_seconds is stored only when it is a non-negative number.
    """
    statement = select(DeepWorkSession).where(
        DeepWorkSession.id == session_id, DeepWorkSession.user_id == user_id
    )
    deep_work = db.exec(statement).one_or_none()
    if not deep_work:
        raise HTTPException(status_code=404, detail="Session not found")
    if deep_work.end_time is not None:
        raise HTTPException(status_code=400, detail="Session already ended")
    deep_work.end_time = datetime.now(timezone.utc)
    spent = req.actual_duration_seconds if req else None
    if spent is not None and spent >= 0:
        deep_work.actual_duration_seconds = spent
    else:
        logger.warning(
            "Invalid or missing actual_duration_seconds for session %s: %s", session_id, spent
        )
    db.add(deep_work)
    db.commit()
    db.refresh(deep_work)
    return deep_work


@router.get("/sessions")
def list_sessions(
    limit: int = 20,
    db: Session = Depends(get_session),
    user_id: str = Depends(current_user_id),
):
    """List recent deep work sessions (newest first) for this user."""
    statement = (
        select(DeepWorkSession)
        .where(DeepWorkSession.user_id == user_id)
        .order_by(DeepWorkSession.start_time.desc())
        .limit(limit)
    )
    return db.exec(statement).all()
