"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Feed entry filtering and EventID extraction
- JMA report decoding
- Report classification and conversion
- Conversion validation and serving policy
- JSON serialization

All functions here are deterministic and have no I/O.
"""

from quake.core.classify import ReportKind, classify_event
from quake.core.config import Config, ConversionPolicy
from quake.core.converter import convert
from quake.core.events import EarlyWarning, NormalizedEvent, Quake, Tsunami
from quake.core.extractor import FeedEntry, extract_event_ids
from quake.core.report import Report, decode_report
from quake.core.serializer import to_json
from quake.core.validator import Finding, FindingKind, apply_policy, validate

__all__ = [
    # Classification
    "ReportKind",
    "classify_event",
    # Config
    "Config",
    "ConversionPolicy",
    # Conversion
    "convert",
    "NormalizedEvent",
    "Quake",
    "Tsunami",
    "EarlyWarning",
    # Extraction
    "FeedEntry",
    "extract_event_ids",
    # Report
    "Report",
    "decode_report",
    # Serialization
    "to_json",
    # Validation
    "Finding",
    "FindingKind",
    "validate",
    "apply_policy",
]
