"""
Content aggregation service.

This module provides the ContentAggregator class which merges the RSS feed,
the sitemap archive and the static episode table into the post and podcast
lists the site renders.
"""

import datetime
import logging
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from stillsmall_site.models import PodcastEpisode, Post, RawFeedEntry
from stillsmall_site.parsers.base import FeedParser
from stillsmall_site.parsers.classifier import (
    ClassifierStrategy,
    clean_podcast_title,
    is_podcast_episode,
)
from stillsmall_site.parsers.content import clean_excerpt, resolve_image
from stillsmall_site.parsers.sitemap import ArchiveCrawler
from stillsmall_site.static_podcasts import STATIC_PODCASTS

logger = logging.getLogger(__name__)

T = TypeVar("T", Post, PodcastEpisode)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def transform_to_post(
    entry: RawFeedEntry, now: Callable[[], datetime.datetime] = _now
) -> Post:
    """Builds a Post from a raw entry, filling in defaults."""
    return Post(
        title=entry.get("title") or "Untitled",
        link=entry.get("link") or "",
        pub_date=entry.get("pub_date") or now(),
        excerpt=clean_excerpt(entry.get("content_snippet")),
        content=entry.get("content") or "",
        image=resolve_image(entry),
    )


def transform_to_podcast(
    entry: RawFeedEntry, now: Callable[[], datetime.datetime] = _now
) -> PodcastEpisode:
    """Builds a PodcastEpisode from a raw entry, filling in defaults."""
    enclosure = entry.get("enclosure")
    return PodcastEpisode(
        title=clean_podcast_title(entry.get("title")),
        link=entry.get("link") or "",
        pub_date=entry.get("pub_date") or now(),
        excerpt=clean_excerpt(entry.get("content_snippet")),
        duration=entry.get("duration"),
        audio_url=enclosure.get("url") if enclosure else None,
    )


def dedupe_and_sort(items: Iterable[T]) -> List[T]:
    """
    Keeps the first item seen for each link, then orders newest first.
    Items without a link have no identity and are all kept.

    The sort is stable, so equal dates keep encounter order.
    """
    seen = set()
    unique: List[T] = []
    for item in items:
        link = item["link"]
        if link:
            if link in seen:
                continue
            seen.add(link)
        unique.append(item)
    return sorted(unique, key=lambda item: item["pub_date"], reverse=True)


class ContentAggregator:
    """Produces the site's post and podcast lists."""

    def __init__(
        self,
        feed_parser: FeedParser,
        feed_url: str,
        archive_crawler: Optional[ArchiveCrawler] = None,
        static_podcasts: Sequence[PodcastEpisode] = STATIC_PODCASTS,
        strategy: ClassifierStrategy = ClassifierStrategy.COMBINED,
    ):
        self.feed_parser = feed_parser
        self.feed_url = feed_url
        self.archive_crawler = archive_crawler
        self.static_podcasts = tuple(static_podcasts)
        self.strategy = strategy

    def _is_podcast(self, entry: RawFeedEntry) -> bool:
        return is_podcast_episode(entry, self.strategy)

    def get_posts(self) -> List[Post]:
        """Feed posts plus archive posts, newest first."""
        entries = self.feed_parser.fetch(self.feed_url)
        posts = [transform_to_post(e) for e in entries if not self._is_podcast(e)]

        if self.archive_crawler is not None:
            known_links = [e.get("link") or "" for e in entries]
            archived = self.archive_crawler.crawl(known_links)
            posts.extend(
                transform_to_post(e) for e in archived if not self._is_podcast(e)
            )

        result = dedupe_and_sort(posts)
        logger.info("Aggregated %d posts.", len(result))
        return result

    def get_podcasts(self) -> List[PodcastEpisode]:
        """Feed episodes plus fallback episodes missing from the feed."""
        entries = self.feed_parser.fetch(self.feed_url)
        episodes = [transform_to_podcast(e) for e in entries if self._is_podcast(e)]

        live_links = {ep["link"] for ep in episodes}
        episodes.extend(
            ep for ep in self.static_podcasts if ep["link"] not in live_links
        )

        result = dedupe_and_sort(episodes)
        logger.info("Aggregated %d podcast episodes.", len(result))
        return result

    def get_latest_posts(self, count: int = 6) -> List[Post]:
        return self.get_posts()[:count]

    def get_latest_podcasts(self, count: int = 3) -> List[PodcastEpisode]:
        return self.get_podcasts()[:count]
