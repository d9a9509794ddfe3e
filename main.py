"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the quake package.
"""

from quake.main import (
    event_details,
    events,
)

__all__ = [
    "events",
    "event_details",
]
