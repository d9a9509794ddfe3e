"""Web API Handler - Serves JMA events as JSON.

This module provides HTTP endpoints for the web frontend.
Part of the imperative shell - handles HTTP I/O.
"""

import json
import logging
from typing import Any

from flask import Request, Response

from quake.core.errors import PipelineError
from quake.core.serializer import events_list_to_json
from quake.orchestrator import Orchestrator
from quake.shell.config_loader import load_config

logger = logging.getLogger(__name__)

# Value of the "debug" query parameter that selects fixture documents
DEBUG_FLAG_VALUE = "dummy"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "3600",
}


def _with_cors(response: Response) -> Response:
    for key, value in CORS_HEADERS.items():
        response.headers[key] = value
    return response


def _json_response(body: str, status: int = 200) -> Response:
    """Create a JSON response with CORS headers from a serialized body."""
    return _with_cors(Response(body, status=status, mimetype="application/json"))


def _error_response(data: dict[str, Any], status: int) -> Response:
    return _json_response(json.dumps(data, ensure_ascii=False), status=status)


def _preflight() -> Response:
    return _with_cors(Response("", status=204))


_orchestrator: Orchestrator | None = None


def _get_orchestrator() -> Orchestrator:
    """Get or create the orchestrator shared by warm invocations."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator(load_config())
    return _orchestrator


def get_events(request: Request, orchestrator: Orchestrator | None = None) -> Response:
    """API endpoint: List current EventIDs from the JMA feeds.

    Returns:
        JSON {"events": [...]}, 502 if a feed cannot be fetched
    """
    if request.method == "OPTIONS":
        return _preflight()

    orchestrator = orchestrator or _get_orchestrator()

    try:
        events = orchestrator.list_events()
    except PipelineError:
        logger.exception("Failed to list JMA events")
        return _error_response({"error": "Failed to fetch event feeds"}, status=502)

    return _json_response(events_list_to_json(events))


def get_event_details(request: Request, orchestrator: Orchestrator | None = None) -> Response:
    """API endpoint: Get the normalized details of one event.

    Query params:
        id: EventID (required)
        debug: "dummy" to read fixture documents instead of JMA data

    Returns:
        The event JSON; 400 if id is missing or the event could not be
        converted or failed validation
    """
    if request.method == "OPTIONS":
        return _preflight()

    event_id = request.args.get("id", "")
    if not event_id:
        return _error_response({"error": "Missing required query parameter: id"}, status=400)

    debug = request.args.get("debug") == DEBUG_FLAG_VALUE

    orchestrator = orchestrator or _get_orchestrator()

    try:
        data = orchestrator.get_event_details(event_id, debug=debug)
    except PipelineError as e:
        # Kind is logged by the orchestrator; clients get a uniform answer
        logger.info("Details for %s unavailable: %s", event_id, type(e).__name__)
        return _error_response(
            {"error": "Could not produce details for this event", "id": event_id},
            status=400,
        )

    return _json_response(data)
