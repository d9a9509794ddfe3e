"""Event extraction - Pure functions.

This module turns the entries of the two JMA feeds into an ordered,
duplicate-free list of EventIDs. Fetching the feeds is handled by the
imperative shell (JMA client); this module only contains the pure logic.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FeedEntry:
    """One entry of a fetched feed.

    Attributes:
        link: URL of the entry's detail XML document
    """
    link: str


def is_eligible(link: str, tokens: tuple[str, ...]) -> bool:
    """Check whether a feed link refers to a recognized report type.

    Pure function.
    """
    return any(token in link for token in tokens)


def derive_event_id(link: str, base_url: str, tokens: tuple[str, ...]) -> str | None:
    """Derive the EventID of an eligible feed link.

    Pure function.

    Strips the data base URL and the ".xml" suffix. Returns None when the
    link is not under base_url, or when the recognized token was only in
    the stripped part (the EventID must keep it for classification).

    Args:
        link: Feed entry link
        base_url: Data base URL the EventID is relative to
        tokens: Recognized report tokens

    Returns:
        EventID, or None if the link cannot yield one
    """
    if not link.startswith(base_url):
        return None

    event_id = link[len(base_url):]
    if event_id.endswith(".xml"):
        event_id = event_id[: -len(".xml")]

    if not event_id or not is_eligible(event_id, tokens):
        return None

    return event_id


def extract_event_ids(
    realtime_entries: list[FeedEntry],
    longterm_entries: list[FeedEntry],
    tokens: tuple[str, ...],
    base_url: str,
) -> list[str]:
    """Build the ordered EventID list from both feeds.

    Pure function.

    Realtime entries come first, then long-term entries, each in feed
    order. An EventID already in the result is never appended again,
    whichever feed it came from.

    Args:
        realtime_entries: Entries of the near-real-time feed
        longterm_entries: Entries of the long-term feed
        tokens: Recognized report tokens
        base_url: Data base URL

    Returns:
        Duplicate-free list of EventIDs
    """
    event_ids: list[str] = []
    seen: set[str] = set()

    for entry in [*realtime_entries, *longterm_entries]:
        if not is_eligible(entry.link, tokens):
            continue

        event_id = derive_event_id(entry.link, base_url, tokens)
        if event_id is None or event_id in seen:
            continue

        seen.add(event_id)
        event_ids.append(event_id)

    return event_ids
