"""
RSS feed parser implementation.

This module provides the SubstackFeedParser class for fetching and parsing
the publication's RSS feed, including podcast enclosures and itunes fields.
"""

import calendar
import datetime
import logging
from typing import Any, List, Optional

import requests
import feedparser  # type: ignore
from stillsmall_site.models import Attachment, RawFeedEntry
from stillsmall_site.parsers.base import FeedParser
from stillsmall_site.parsers.content import strip_html

logger = logging.getLogger(__name__)

USER_AGENT = "StillSmallSiteBot/1.0"
DEFAULT_TIMEOUT = 10


def struct_to_datetime(parsed: Any) -> Optional[datetime.datetime]:
    """Converts feedparser's UTC struct_time into an aware datetime."""
    if not parsed:
        return None
    try:
        return datetime.datetime.fromtimestamp(
            calendar.timegm(parsed), tz=datetime.timezone.utc
        )
    except (TypeError, ValueError, OverflowError):
        return None


class SubstackFeedParser(FeedParser):
    """Parses a Substack RSS feed into raw entries."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def _entry_content(self, entry: Any) -> str:
        """Prefers content:encoded over the description."""
        contents = entry.get("content") or []
        for item in contents:
            value = item.get("value")
            if value:
                return value
        return entry.get("summary") or ""

    def _enclosure(self, entry: Any) -> Optional[Attachment]:
        for enclosure in entry.get("enclosures") or []:
            url = enclosure.get("href") or enclosure.get("url")
            if url:
                return Attachment(url=url, type=enclosure.get("type") or "")
        return None

    def _to_raw_entry(self, entry: Any) -> RawFeedEntry:
        content = self._entry_content(entry)
        image = entry.get("image") or {}
        return RawFeedEntry(
            title=entry.get("title"),
            link=entry.get("link"),
            pub_date=struct_to_datetime(
                entry.get("published_parsed") or entry.get("updated_parsed")
            ),
            content=content,
            content_snippet=strip_html(content) or strip_html(entry.get("summary")),
            enclosure=self._enclosure(entry),
            duration=entry.get("itunes_duration"),
            artwork=image.get("href") if hasattr(image, "get") else None,
            og_image=None,
        )

    def fetch(self, url: str) -> List[RawFeedEntry]:
        """Fetches and parses the feed, returning [] on any failure."""
        items: List[RawFeedEntry] = []
        try:
            try:
                resp = requests.get(
                    url, timeout=self.timeout, headers={"User-Agent": USER_AGENT}
                )
                resp.raise_for_status()
                feed_content = resp.content
            except requests.RequestException as req_err:
                logger.error("Network error fetching feed %s: %s", url, req_err)
                return []

            feed = feedparser.parse(feed_content)
            if feed.get("bozo") and not feed.entries:
                logger.error(
                    "Error parsing feed %s: %s", url, feed.get("bozo_exception")
                )
                return []

            for entry in feed.entries:
                items.append(self._to_raw_entry(entry))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error parsing feed %s: %s", url, e)
            return []

        logger.info("Fetched %d entries from %s", len(items), url)
        return items
