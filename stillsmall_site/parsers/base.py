"""
Base classes and interfaces for feed parsers.

This module defines the contract that all feed parsers must follow.
"""

from typing import Protocol, List
from stillsmall_site.models import RawFeedEntry


class FeedParser(Protocol):
    """
    Protocol for feed parsers.

    Classes implementing this protocol should be able to fetch and parse
    content from a given URL into a list of RawFeedEntry objects. They never
    raise: a failed fetch yields an empty list.
    """

    def fetch(self, url: str) -> List[RawFeedEntry]:
        """Fetches and parses a feed."""
