"""Report classification - Pure functions.

An EventID embeds the JMA data type code of its report (e.g.
"20240101071409_0_VTSE41_010000"). Classification maps that string onto
the closed set of report kinds the converter knows.
"""

from enum import Enum


class ReportKind(Enum):
    """Report kinds, one per normalized event variant."""
    TSUNAMI = "tsunami"
    EARLY_WARNING = "early_warning"
    QUAKE = "quake"


# Checked in order, first match wins. Anything unmatched is a QUAKE.
CLASSIFICATION_TOKENS: tuple[tuple[ReportKind, str], ...] = (
    (ReportKind.TSUNAMI, "_VTSE41"),
    (ReportKind.EARLY_WARNING, "_VXSE43"),
)


def classify_event(event_id: str) -> ReportKind:
    """Select the report kind for an EventID.

    Pure function. Total: every string maps to exactly one kind.

    Args:
        event_id: EventID derived from a feed link

    Returns:
        The ReportKind whose converter handles this event
    """
    for kind, token in CLASSIFICATION_TOKENS:
        if token in event_id:
            return kind
    return ReportKind.QUAKE
