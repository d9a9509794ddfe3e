"""Tests for EventID extraction from feed entries.

Pure functions, no mocks needed.
"""

from quake.core.config import DATA_BASE_URL, DEFAULT_REPORT_TOKENS
from quake.core.extractor import (
    FeedEntry,
    derive_event_id,
    extract_event_ids,
    is_eligible,
)


def entry(name: str) -> FeedEntry:
    return FeedEntry(link=f"{DATA_BASE_URL}{name}.xml")


class TestIsEligible:
    """Tests for is_eligible()."""

    def test_recognized_token(self):
        assert is_eligible(f"{DATA_BASE_URL}20240101000000_0_VXSE53_010000.xml", DEFAULT_REPORT_TOKENS)

    def test_unrecognized_report_type(self):
        """Volcano and other reports in the same feed are skipped."""
        assert not is_eligible(f"{DATA_BASE_URL}20240101000000_0_VFVO53_010000.xml", DEFAULT_REPORT_TOKENS)

    def test_tokens_are_configurable(self):
        link = f"{DATA_BASE_URL}20240101000000_0_VXSE52_010000.xml"
        assert is_eligible(link, ("_VXSE52_",))
        assert not is_eligible(link, ("_VXSE51_", "_VXSE53_"))


class TestDeriveEventId:
    """Tests for derive_event_id()."""

    def test_strips_base_url_and_suffix(self):
        link = "https://www.data.jma.go.jp/developer/xml/data/20240101000000_VXSE53_010100.xml"

        result = derive_event_id(link, DATA_BASE_URL, DEFAULT_REPORT_TOKENS)

        assert result == "20240101000000_VXSE53_010100"

    def test_link_outside_base_url(self):
        link = "https://example.com/data/20240101000000_VXSE53_010100.xml"

        assert derive_event_id(link, DATA_BASE_URL, DEFAULT_REPORT_TOKENS) is None

    def test_token_only_in_base_url(self):
        """The EventID must keep the token it was selected for."""
        base = "https://example.com/_VXSE53_/"
        link = base + "20240101000000_VFVO53_010000.xml"

        assert derive_event_id(link, base, DEFAULT_REPORT_TOKENS) is None


class TestExtractEventIds:
    """Tests for extract_event_ids()."""

    def test_realtime_before_longterm(self):
        realtime = [entry("20240101000200_0_VXSE53_010000"), entry("20240101000100_0_VXSE51_010000")]
        longterm = [entry("20231231000000_0_VXSE53_010000")]

        result = extract_event_ids(realtime, longterm, DEFAULT_REPORT_TOKENS, DATA_BASE_URL)

        assert result == [
            "20240101000200_0_VXSE53_010000",
            "20240101000100_0_VXSE51_010000",
            "20231231000000_0_VXSE53_010000",
        ]

    def test_longterm_duplicates_are_dropped(self):
        """An event in both feeds appears once, at its realtime position."""
        shared = entry("20240101000100_0_VXSE53_010000")
        realtime = [shared]
        longterm = [entry("20231231000000_0_VXSE53_010000"), shared]

        result = extract_event_ids(realtime, longterm, DEFAULT_REPORT_TOKENS, DATA_BASE_URL)

        assert result == [
            "20240101000100_0_VXSE53_010000",
            "20231231000000_0_VXSE53_010000",
        ]

    def test_duplicates_within_one_feed_are_dropped(self):
        dup = entry("20240101000100_0_VTSE41_010000")

        result = extract_event_ids([dup, dup], [dup], DEFAULT_REPORT_TOKENS, DATA_BASE_URL)

        assert result == ["20240101000100_0_VTSE41_010000"]

    def test_no_duplicates_in_mixed_feeds(self):
        names = [f"2024010100{i:04d}_0_VXSE53_010000" for i in range(10)]
        realtime = [entry(n) for n in names[:7]]
        longterm = [entry(n) for n in reversed(names[3:])]

        result = extract_event_ids(realtime, longterm, DEFAULT_REPORT_TOKENS, DATA_BASE_URL)

        assert len(result) == len(set(result)) == 10
        assert result[:7] == names[:7]

    def test_ineligible_entries_are_skipped(self):
        realtime = [entry("20240101000000_0_VFVO53_010000"), entry("20240101000000_0_VXSE43_010000")]

        result = extract_event_ids(realtime, [], DEFAULT_REPORT_TOKENS, DATA_BASE_URL)

        assert result == ["20240101000000_0_VXSE43_010000"]

    def test_empty_feeds(self):
        assert extract_event_ids([], [], DEFAULT_REPORT_TOKENS, DATA_BASE_URL) == []
