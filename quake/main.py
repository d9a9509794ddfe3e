"""Cloud Function Entry Point.

This module provides the entry points for Google Cloud Functions.
They are thin wrappers that configure logging and delegate to the
API handlers.
"""

import logging
import os

import functions_framework
from flask import Request, Response

from quake import api_handler


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@functions_framework.http
def events(request: Request) -> Response:
    """HTTP Cloud Function: GET /events."""
    return api_handler.get_events(request)


@functions_framework.http
def event_details(request: Request) -> Response:
    """HTTP Cloud Function: GET /events/details?id=..."""
    return api_handler.get_event_details(request)
