"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field


REALTIME_FEED_URL = "https://www.data.jma.go.jp/developer/xml/feed/eqvol.xml"
LONGTERM_FEED_URL = "https://www.data.jma.go.jp/developer/xml/feed/eqvol_l.xml"
DATA_BASE_URL = "https://www.data.jma.go.jp/developer/xml/data/"

# Fixture documents served instead of live data when debug=dummy
DEBUG_BASE_URL = "https://raw.githubusercontent.com/nexryai/quake/main/test/examples/"

# Feed links containing one of these are treated as events
DEFAULT_REPORT_TOKENS: tuple[str, ...] = (
    "_VXSE51_",  # 震度速報
    "_VXSE52_",  # 震源に関する情報
    "_VXSE53_",  # 震源・震度に関する情報
    "_VXSE43_",  # 緊急地震速報（警報）
    "_VTSE41_",  # 津波警報・注意報・予報
)

DEFAULT_TIMEOUT = 10
DEFAULT_MAX_RESPONSE_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class ConversionPolicy:
    """Operator overrides for validation findings.

    Attributes:
        force: Serve even when Error findings exist (also skips warnings)
        ignore_warning: Serve despite Warning findings
    """
    force: bool = False
    ignore_warning: bool = False


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        realtime_feed_url: Near-real-time JMA feed
        longterm_feed_url: Long-term archive JMA feed
        data_base_url: Prefix of report links; EventIDs are relative to it
        debug_base_url: Report source used for debug requests
        report_tokens: Link substrings that make a feed entry an event
        timeout_seconds: Per-request timeout for upstream fetches
        max_response_bytes: Upper bound on an upstream response body
        policy: Default conversion policy
    """
    realtime_feed_url: str = REALTIME_FEED_URL
    longterm_feed_url: str = LONGTERM_FEED_URL
    data_base_url: str = DATA_BASE_URL
    debug_base_url: str = DEBUG_BASE_URL
    report_tokens: tuple[str, ...] = DEFAULT_REPORT_TOKENS
    timeout_seconds: float = DEFAULT_TIMEOUT
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES
    policy: ConversionPolicy = field(default_factory=ConversionPolicy)


@dataclass
class ConfigIssue:
    """A configuration validation problem.

    Attributes:
        field: The field that has a problem
        message: Human-readable description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


def _validate_url(value: str, field_name: str, trailing_slash: bool = False) -> list[ConfigIssue]:
    issues = []

    if not value.startswith(("https://", "http://")):
        issues.append(ConfigIssue(
            field=field_name,
            message=f"Not an http(s) URL: {value!r}",
        ))
    elif trailing_slash and not value.endswith("/"):
        issues.append(ConfigIssue(
            field=field_name,
            message="Base URL should end with '/' (EventIDs are appended to it)",
            severity="warning",
        ))

    return issues


def validate_config(config: Config) -> list[ConfigIssue]:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        List of issues (empty if valid)
    """
    issues: list[ConfigIssue] = []

    issues.extend(_validate_url(config.realtime_feed_url, "realtime_feed_url"))
    issues.extend(_validate_url(config.longterm_feed_url, "longterm_feed_url"))
    issues.extend(_validate_url(config.data_base_url, "data_base_url", trailing_slash=True))
    issues.extend(_validate_url(config.debug_base_url, "debug_base_url", trailing_slash=True))

    if not config.report_tokens:
        issues.append(ConfigIssue(
            field="report_tokens",
            message="No report tokens configured, no feed entry will be recognized",
            severity="warning",
        ))

    if any(not token for token in config.report_tokens):
        issues.append(ConfigIssue(
            field="report_tokens",
            message="Empty report token would match every feed entry",
        ))

    if config.timeout_seconds <= 0:
        issues.append(ConfigIssue(
            field="timeout_seconds",
            message=f"Timeout must be positive, got {config.timeout_seconds}",
        ))

    if config.max_response_bytes <= 0:
        issues.append(ConfigIssue(
            field="max_response_bytes",
            message=f"Response limit must be positive, got {config.max_response_bytes}",
        ))

    if config.policy.force:
        issues.append(ConfigIssue(
            field="policy.force",
            message="force is on: records with validation errors will be served",
            severity="warning",
        ))

    return issues
