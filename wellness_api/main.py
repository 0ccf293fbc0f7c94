"""
Wellness API – progress, moods and deep work sessions
Start with: uvicorn wellness_api.main:app --reload
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wellness_api import __version__
from wellness_api.config import CORS_ORIGINS, configure_logging
from wellness_api.db import create_db_and_tables
from wellness_api.routers import moods, progress, sessions

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    yield


app = FastAPI(
    title="Wellness API",
    description="Progress statistics, mood check-ins and deep work sessions",
    version=__version__,
    lifespan=lifespan,
)

# Allow the mobile/web frontend to call this API
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(progress.router)
app.include_router(moods.router)
app.include_router(sessions.router)


@app.get("/health")
def health():
    """Check that the API is running. Frontend can call this first."""
    return {"status": "ok", "message": "Wellness API is running"}


@app.get("/")
def root():
    """Root welcome."""
    return {"app": "Wellness API", "docs": "/docs"}
