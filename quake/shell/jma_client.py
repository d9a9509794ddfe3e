"""JMA Data Client - Imperative Shell.

This module handles HTTP communication with the JMA XML data service
(feeds and report documents). All I/O is contained here; parsing of
report contents and all business logic are in the core module.

Every request is bounded by a timeout and a maximum response size so a
slow or oversized upstream document cannot stall a caller.
"""

import logging
import time

import feedparser
import requests
import urllib3
from urllib3.exceptions import ReadTimeoutError

from quake.core.config import DEFAULT_MAX_RESPONSE_BYTES, DEFAULT_TIMEOUT
from quake.core.errors import FeedParseError, FetchError, ResponseTooLargeError
from quake.core.extractor import FeedEntry


logger = logging.getLogger(__name__)


USER_AGENT = "quake-feed/1.0"

# Upper bound of a single read when streaming a response body
CHUNK_SIZE = 64 * 1024


def _entry_link(entry: dict) -> str:
    """Pick the detail-document URL of a feed entry.

    Atom entries carry it as <link href>; the entry <id> is not a URL in
    general. The alternate link wins, then the first link with an href.
    """
    links = [link for link in entry.get("links", []) if link.get("href")]
    for link in links:
        if link.get("rel") == "alternate":
            return link["href"]
    if links:
        return links[0]["href"]
    return entry.get("link", "")


class JMAClient:
    """Client for fetching JMA feeds and report XML.

    This is part of the imperative shell - it handles HTTP I/O.
    Instances hold no per-request state and may be shared across threads.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
    ) -> None:
        """Initialize JMA client.

        Args:
            timeout: Request timeout in seconds
            max_bytes: Maximum accepted response body size
        """
        self.timeout = timeout
        self.max_bytes = max_bytes

    def _get(self, url: str) -> bytes:
        """GET a URL and return the body, enforcing timeout and size limit.

        This method performs HTTP I/O.

        The timeout bounds the whole request, not only each socket read,
        so a server trickling bytes cannot hold the caller past it.

        Raises:
            ResponseTooLargeError: If the body exceeds max_bytes
            FetchError: On network errors, timeouts or non-2xx status
        """
        deadline = time.monotonic() + self.timeout

        try:
            with requests.get(
                url,
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
                stream=True,
            ) as response:
                response.raise_for_status()

                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    raise ResponseTooLargeError(
                        f"{url}: Content-Length {declared} exceeds limit of {self.max_bytes} bytes"
                    )

                body = bytearray()
                while True:
                    if time.monotonic() > deadline:
                        raise FetchError(f"{url}: timed out after {self.timeout}s")

                    # read1 returns whatever one socket read yields
                    chunk = response.raw.read1(CHUNK_SIZE, decode_content=True)
                    if not chunk:
                        break

                    body.extend(chunk)
                    if len(body) > self.max_bytes:
                        raise ResponseTooLargeError(
                            f"{url}: response exceeds limit of {self.max_bytes} bytes"
                        )

                return bytes(body)

        except (requests.Timeout, ReadTimeoutError) as e:
            raise FetchError(f"{url}: timed out after {self.timeout}s") from e
        except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
            raise FetchError(f"{url}: request failed: {e}") from e

    def fetch_feed(self, url: str) -> list[FeedEntry]:
        """Fetch and parse an Atom feed.

        This method performs HTTP I/O.

        Args:
            url: Feed URL

        Returns:
            Feed entries in document order

        Raises:
            FetchError: If the request fails
            FeedParseError: If the document is not a well-formed feed
        """
        logger.info("Fetching feed %s", url)

        content = self._get(url)
        parsed = feedparser.parse(content)

        if not parsed.get("version"):
            reason = parsed.get("bozo_exception", "unrecognized format")
            raise FeedParseError(f"{url}: not a feed: {reason}")

        if parsed.get("bozo") and not parsed.entries:
            raise FeedParseError(f"{url}: malformed feed: {parsed.get('bozo_exception')}")

        entries = []
        for entry in parsed.entries:
            link = _entry_link(entry)
            if link:
                entries.append(FeedEntry(link=link))

        logger.info("Fetched %d entries from %s", len(entries), url)

        return entries

    def fetch_report(self, base_url: str, event_id: str) -> bytes:
        """Fetch the raw XML document of an event.

        This method performs HTTP I/O.

        Args:
            base_url: Data base URL (production or debug fixtures)
            event_id: EventID; the URL is base_url + event_id + ".xml"

        Returns:
            Raw XML bytes

        Raises:
            FetchError: If the request fails
        """
        url = base_url + event_id + ".xml"

        logger.info("Fetching report %s", url)

        try:
            return self._get(url)
        except FetchError as e:
            e.event_id = event_id
            raise
