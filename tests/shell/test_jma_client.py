"""Tests for the JMA client.

Uses the `responses` library to mock HTTP requests, and a local
server for the timing of a slowly streamed body.
"""

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests
import responses

from quake.core.errors import FeedParseError, FetchError, ResponseTooLargeError
from quake.shell.jma_client import USER_AGENT, JMAClient, _entry_link


FEED_URL = "https://www.data.jma.go.jp/developer/xml/feed/eqvol.xml"
BASE_URL = "https://www.data.jma.go.jp/developer/xml/data/"

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" lang="ja">
  <title>高頻度（地震火山）</title>
  <id>urn:uuid:feed</id>
  <updated>2024-01-01T07:20:00+09:00</updated>
  <entry>
    <title>震源・震度に関する情報</title>
    <id>urn:uuid:1</id>
    <updated>2024-01-01T07:14:09Z</updated>
    <link type="application/xml" href="https://www.data.jma.go.jp/developer/xml/data/20240101071409_0_VXSE53_010000.xml"/>
  </entry>
  <entry>
    <title>震度速報</title>
    <id>urn:uuid:2</id>
    <updated>2024-01-01T07:11:00Z</updated>
    <link type="application/xml" href="https://www.data.jma.go.jp/developer/xml/data/20240101071100_0_VXSE51_010000.xml"/>
  </entry>
</feed>
""".encode("utf-8")


class TestFetchFeed:
    """Tests for JMAClient.fetch_feed()."""

    @responses.activate
    def test_returns_entry_links_in_order(self):
        responses.add(responses.GET, FEED_URL, body=ATOM_FEED, status=200)

        entries = JMAClient().fetch_feed(FEED_URL)

        assert [e.link for e in entries] == [
            BASE_URL + "20240101071409_0_VXSE53_010000.xml",
            BASE_URL + "20240101071100_0_VXSE51_010000.xml",
        ]

    @responses.activate
    def test_prefers_alternate_link_over_entry_id(self):
        feed = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>feed</title>
  <id>urn:uuid:feed</id>
  <updated>2024-01-01T00:00:00Z</updated>
  <entry>
    <title>震源・震度に関する情報</title>
    <id>urn:uuid:abc</id>
    <updated>2024-01-01T00:00:00Z</updated>
    <link rel="related" href="https://example.com/related.html"/>
    <link rel="alternate" type="application/xml" href="https://www.data.jma.go.jp/developer/xml/data/20240101000000_VXSE53_010100.xml"/>
  </entry>
</feed>
""".encode("utf-8")
        responses.add(responses.GET, FEED_URL, body=feed, status=200)

        entries = JMAClient().fetch_feed(FEED_URL)

        assert [e.link for e in entries] == [BASE_URL + "20240101000000_VXSE53_010100.xml"]

    @responses.activate
    def test_sends_user_agent(self):
        responses.add(responses.GET, FEED_URL, body=ATOM_FEED, status=200)

        JMAClient().fetch_feed(FEED_URL)

        assert responses.calls[0].request.headers["User-Agent"] == USER_AGENT

    @responses.activate
    def test_not_a_feed_raises_parse_error(self):
        responses.add(responses.GET, FEED_URL, body=b"service unavailable", status=200)

        with pytest.raises(FeedParseError):
            JMAClient().fetch_feed(FEED_URL)

    @responses.activate
    def test_http_error_raises_fetch_error(self):
        responses.add(responses.GET, FEED_URL, status=503)

        with pytest.raises(FetchError) as exc_info:
            JMAClient().fetch_feed(FEED_URL)

        assert not isinstance(exc_info.value, FeedParseError)

    @responses.activate
    def test_timeout_raises_fetch_error(self):
        responses.add(responses.GET, FEED_URL, body=requests.exceptions.ConnectTimeout())

        with pytest.raises(FetchError, match="timed out"):
            JMAClient(timeout=3).fetch_feed(FEED_URL)

    @responses.activate
    def test_oversized_feed_raises(self):
        responses.add(responses.GET, FEED_URL, body=ATOM_FEED, status=200)

        with pytest.raises(ResponseTooLargeError):
            JMAClient(max_bytes=100).fetch_feed(FEED_URL)


class TestFetchReport:
    """Tests for JMAClient.fetch_report()."""

    @responses.activate
    def test_url_is_base_plus_event_id(self):
        url = BASE_URL + "20240101071409_0_VXSE53_010000.xml"
        responses.add(responses.GET, url, body=b"<Report/>", status=200)

        data = JMAClient().fetch_report(BASE_URL, "20240101071409_0_VXSE53_010000")

        assert data == b"<Report/>"
        assert responses.calls[0].request.url == url

    @responses.activate
    def test_failure_carries_event_id(self):
        responses.add(responses.GET, BASE_URL + "missing.xml", status=404)

        with pytest.raises(FetchError) as exc_info:
            JMAClient().fetch_report(BASE_URL, "missing")

        assert exc_info.value.event_id == "missing"

    @responses.activate
    def test_oversized_report_raises(self):
        responses.add(responses.GET, BASE_URL + "big.xml", body=b"x" * 2048, status=200)

        with pytest.raises(ResponseTooLargeError):
            JMAClient(max_bytes=1024).fetch_report(BASE_URL, "big")


class TestEntryLink:
    """Tests for _entry_link()."""

    def test_alternate_link_wins(self):
        entry = {
            "link": "urn:uuid:abc",
            "links": [
                {"rel": "related", "href": "https://example.com/a"},
                {"rel": "alternate", "href": "https://example.com/b"},
            ],
        }
        assert _entry_link(entry) == "https://example.com/b"

    def test_first_link_without_alternate(self):
        entry = {"links": [{"rel": "related", "href": "https://example.com/a"}]}
        assert _entry_link(entry) == "https://example.com/a"

    def test_falls_back_to_link_key(self):
        assert _entry_link({"link": "https://example.com/c"}) == "https://example.com/c"

    def test_nothing_usable(self):
        assert _entry_link({"links": [{"rel": "alternate"}]}) == ""


class _TricklingHandler(BaseHTTPRequestHandler):
    """Sends a small body a few bytes at a time."""

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "application/xml")
        self.end_headers()
        try:
            for _ in range(20):
                self.wfile.write(b"x" * 20)
                self.wfile.flush()
                time.sleep(0.3)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def trickling_server(monkeypatch):
    monkeypatch.setenv("NO_PROXY", "127.0.0.1")
    server = ThreadingHTTPServer(("127.0.0.1", 0), _TricklingHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/"
    server.shutdown()
    server.server_close()


class TestTotalTimeout:
    """The timeout bounds the whole request, not each read."""

    def test_slow_body_raises_within_timeout(self, trickling_server):
        client = JMAClient(timeout=1)

        started = time.monotonic()
        with pytest.raises(FetchError, match="timed out"):
            client.fetch_report(trickling_server, "20240101000000_VXSE53_010100")
        elapsed = time.monotonic() - started

        assert elapsed < 3

    def test_slow_body_failure_carries_event_id(self, trickling_server):
        with pytest.raises(FetchError) as exc_info:
            JMAClient(timeout=0.5).fetch_report(trickling_server, "slow")

        assert exc_info.value.event_id == "slow"
