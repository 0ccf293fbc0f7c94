from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from wellness_api.db import get_session
from wellness_api.errors import AggregationError, PersistenceError, ValidationError, WellnessError
from wellness_api.store import SQLModelStore


def get_store(db: Session = Depends(get_session)) -> SQLModelStore:
    return SQLModelStore(db)


def current_user_id(user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    if not user_id:
        raise HTTPException(status_code=400, detail="Missing X-User-Id header")
    return user_id


def http_error(exc: WellnessError) -> HTTPException:
    """Map a core failure to the HTTP error the frontend sees."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, (AggregationError, PersistenceError)):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
