"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. It's the "glue" that
makes the application work.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from quake.core.classify import classify_event
from quake.core.config import Config, ConversionPolicy
from quake.core.converter import convert
from quake.core.errors import PipelineError
from quake.core.extractor import extract_event_ids
from quake.core.report import decode_report
from quake.core.serializer import to_json
from quake.core.validator import apply_policy, errors_of, validate, warnings_of
from quake.shell.jma_client import JMAClient


logger = logging.getLogger(__name__)


# Upper bound on parallel conversions in get_many_event_details
DEFAULT_MAX_WORKERS = 4


@dataclass
class EventDetailResult:
    """Result of producing details for a single event.

    Attributes:
        event_id: The event that was processed
        json: Serialized event, None if it failed
        error: The failure, None on success
    """
    event_id: str
    json: str | None = None
    error: PipelineError | None = None

    @property
    def success(self) -> bool:
        """Returns True if the event was converted and passed validation."""
        return self.error is None


class Orchestrator:
    """Coordinates event listing and event detail conversion.

    This class wires together:
    - JMA client (fetches feeds and report XML)
    - Core functions (extraction, decoding, conversion, validation)

    Every call is independent; the orchestrator keeps no per-request
    state, so one instance may serve concurrent requests.
    """

    def __init__(
        self,
        config: Config,
        jma_client: JMAClient | None = None,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            jma_client: JMA client (created if not provided)
        """
        self.config = config
        self.jma_client = jma_client or JMAClient(
            timeout=config.timeout_seconds,
            max_bytes=config.max_response_bytes,
        )

    def list_events(self) -> list[str]:
        """Fetch both feeds and extract the current EventIDs.

        The two feeds are fetched concurrently. If either fetch fails the
        whole listing fails; no partial list is returned.

        Returns:
            Ordered, duplicate-free EventIDs

        Raises:
            FetchError: If either feed cannot be fetched or parsed
        """
        with ThreadPoolExecutor(max_workers=2) as pool:
            realtime = pool.submit(self.jma_client.fetch_feed, self.config.realtime_feed_url)
            longterm = pool.submit(self.jma_client.fetch_feed, self.config.longterm_feed_url)

            try:
                realtime_entries = realtime.result()
                longterm_entries = longterm.result()
            except PipelineError as e:
                logger.error("Failed to fetch feed: %s", e)
                raise

        # Pure core function
        event_ids = extract_event_ids(
            realtime_entries,
            longterm_entries,
            self.config.report_tokens,
            self.config.data_base_url,
        )

        logger.info(
            "%d events from %d realtime and %d long-term entries",
            len(event_ids),
            len(realtime_entries),
            len(longterm_entries),
        )

        return event_ids

    def get_event_details(
        self,
        event_id: str,
        policy: ConversionPolicy | None = None,
        debug: bool = False,
    ) -> str:
        """Fetch, convert, validate and serialize one event.

        This is the main entry point that:
        1. Fetches the report XML
        2. Decodes it
        3. Classifies the event and converts the report
        4. Validates the conversion
        5. Applies the conversion policy to the findings
        6. Serializes the event to JSON

        Args:
            event_id: EventID as returned by list_events()
            policy: Validation overrides (config default if None)
            debug: Fetch from the debug fixture source instead of JMA

        Returns:
            JSON document of the normalized event

        Raises:
            PipelineError: The first failing stage's error (FetchError,
                DecodeError, ConversionError, ValidationError,
                ValidationWarning or SerializationError)
        """
        if policy is None:
            policy = self.config.policy

        base_url = self.config.debug_base_url if debug else self.config.data_base_url

        try:
            # Step 1: Fetch
            data = self.jma_client.fetch_report(base_url, event_id)

            # Steps 2-6: pure core functions
            report = decode_report(data)
            event = convert(event_id, report)

            findings = validate(event_id, report, event)
            for finding in errors_of(findings):
                logger.error("%s: %s", event_id, finding.message)
            for finding in warnings_of(findings):
                logger.warning("%s: %s", event_id, finding.message)

            apply_policy(event_id, findings, policy)

            json_string = to_json(event, event_id)

        except PipelineError as e:
            if e.event_id is None:
                e.event_id = event_id
            logger.error(
                "Could not produce details for %s (%s): %s",
                event_id,
                type(e).__name__,
                e,
            )
            raise

        logger.info(
            "Converted %s as %s with %d findings",
            event_id,
            classify_event(event_id).value,
            len(findings),
        )

        return json_string

    def get_many_event_details(
        self,
        event_ids: list[str],
        policy: ConversionPolicy | None = None,
        debug: bool = False,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> list[EventDetailResult]:
        """Produce details for several events in parallel.

        A failure of one event does not affect the others.

        Returns:
            One result per EventID, in input order
        """
        def run(event_id: str) -> EventDetailResult:
            try:
                return EventDetailResult(
                    event_id=event_id,
                    json=self.get_event_details(event_id, policy, debug),
                )
            except PipelineError as e:
                return EventDetailResult(event_id=event_id, error=e)

        if not event_ids:
            return []

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(run, event_ids))
