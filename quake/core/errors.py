"""Pipeline error taxonomy.

Every stage of the event pipeline raises one of these. The orchestrator
stops at the first failure and lets it propagate; the HTTP layer turns
any PipelineError into the same 400 response.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quake.core.validator import Finding


class PipelineError(Exception):
    """Base class for failures while producing event details.

    Attributes:
        event_id: Event the failure belongs to (None before one is known)
        findings: Validation findings computed before the failure
    """

    def __init__(
        self,
        message: str,
        event_id: str | None = None,
        findings: "list[Finding] | None" = None,
    ) -> None:
        super().__init__(message)
        self.event_id = event_id
        self.findings = list(findings or [])


class FetchError(PipelineError):
    """Network failure, timeout, bad status or size limit."""


class ResponseTooLargeError(FetchError):
    """Upstream response exceeded the configured byte limit."""


class FeedParseError(FetchError):
    """Upstream document is not a well-formed feed."""


class DecodeError(PipelineError):
    """Report XML is malformed or is not a JMA report."""


class ConversionError(PipelineError):
    """A field required by the classified report type is missing or invalid."""

    def __init__(self, message: str, event_id: str | None = None, field: str | None = None) -> None:
        super().__init__(message, event_id=event_id)
        self.field = field


class ValidationError(PipelineError):
    """Error findings are present and were not overridden by policy."""


class ValidationWarning(PipelineError):
    """Warning findings are present and were not overridden by policy."""


class SerializationError(PipelineError):
    """Normalized event could not be rendered to JSON."""
