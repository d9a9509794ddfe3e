"""JSON serialization - Pure functions.

Renders normalized events as the JSON documents served over HTTP.
"""

import json
from typing import Any

from quake.core.errors import SerializationError
from quake.core.events import NormalizedEvent


def event_to_dict(event: NormalizedEvent) -> dict[str, Any]:
    """Convert a normalized event to a JSON-serializable dict.

    Pure function.
    """
    return event.to_dict()


def to_json(event: NormalizedEvent, event_id: str | None = None) -> str:
    """Render a normalized event as a compact JSON document.

    Pure function. Japanese text is kept as-is, not \\u-escaped.

    Args:
        event: Event to render
        event_id: EventID for error reporting

    Returns:
        JSON string

    Raises:
        SerializationError: If the event holds values JSON cannot
            represent (NaN/inf or non-serializable objects)
    """
    try:
        return json.dumps(
            event_to_dict(event),
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"{event_id}: failed to serialize {type(event).__name__}: {e}",
            event_id=event_id,
        ) from e


def events_list_to_json(event_ids: list[str]) -> str:
    """Render the event list document: {"events": [...]}."""
    return json.dumps({"events": event_ids}, ensure_ascii=False)
