"""Quake API - FastAPI service for JMA event data.

Consolidated API endpoints deployed as a single Cloud Run service.
Serves the current JMA event list and the normalized details of each
event.
"""

import logging
import os

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from quake.core.errors import PipelineError
from quake.orchestrator import Orchestrator
from quake.shell.config_loader import load_config

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Quake API",
    description="Normalized JMA earthquake, early warning and tsunami reports",
    version="1.0.0",
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)


# ===== Response Models =====

class EventsResponse(BaseModel):
    events: list[str]


# ===== Orchestrator =====

_orchestrator: Orchestrator | None = None


def get_orchestrator() -> Orchestrator:
    """Get or create the shared orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator(load_config())
    return _orchestrator


# ===== Endpoints =====

@app.get("/events", response_model=EventsResponse)
def list_events():
    """List EventIDs currently in the JMA feeds."""
    try:
        events = get_orchestrator().list_events()
    except PipelineError:
        logger.exception("Failed to list JMA events")
        raise HTTPException(status_code=502, detail="Failed to fetch event feeds")

    return EventsResponse(events=events)


@app.get("/events/details")
def event_details(
    id: str | None = Query(default=None),
    debug: str | None = Query(default=None),
):
    """Normalized details of one event."""
    if not id:
        raise HTTPException(status_code=400, detail="Missing required query parameter: id")

    try:
        data = get_orchestrator().get_event_details(id, debug=debug == "dummy")
    except PipelineError as e:
        logger.info("Details for %s unavailable: %s", id, type(e).__name__)
        raise HTTPException(status_code=400, detail="Could not produce details for this event")

    return Response(content=data, media_type="application/json")


@app.get("/health")
def health_check():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}
