"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from record_tracker.config import LOG_LEVEL, WEB_ORIGINS

# Configure logging in the worker process (so store INFO logs are visible with uvicorn --reload)
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(levelname)s: %(name)s: %(message)s",
)

from record_tracker.api.state import AppState, get_state

# Import routes after state to avoid circular imports
from record_tracker.api.routes import albums, history

__all__ = ["app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = get_state()
    state.startup()
    logging.getLogger(__name__).info("Record tracker using %r", state.db)
    yield


app = FastAPI(
    title="Record Tracker API",
    description="Album catalog and play history",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=WEB_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(albums.router, prefix="/api/albums", tags=["albums"])
app.include_router(history.router, prefix="/api/play_history", tags=["play_history"])


@app.get("/health")
def health_check():
    return {"status": "healthy"}
