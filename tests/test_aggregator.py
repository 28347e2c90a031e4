"""Unit tests for the content aggregator."""

import datetime
import unittest
from unittest.mock import MagicMock, patch

import requests

from stillsmall_site.models import Attachment, PodcastEpisode, RawFeedEntry
from stillsmall_site.parsers.classifier import ClassifierStrategy
from stillsmall_site.parsers.rss import SubstackFeedParser
from stillsmall_site.parsers.sitemap import ArchiveCrawler
from stillsmall_site.services.aggregator import (
    ContentAggregator,
    dedupe_and_sort,
    transform_to_post,
)

UTC = datetime.timezone.utc
FEED_URL = "https://stillsmall.substack.com/feed"


def day(n: int) -> datetime.datetime:
    return datetime.datetime(2024, 1, n, tzinfo=UTC)


def raw(title, link, pub_date=None, enclosure=None, **extra) -> RawFeedEntry:
    entry = RawFeedEntry(
        title=title,
        link=link,
        pub_date=pub_date,
        content=extra.get("content", ""),
        content_snippet=extra.get("content_snippet", ""),
        enclosure=enclosure,
        duration=extra.get("duration"),
        artwork=extra.get("artwork"),
        og_image=extra.get("og_image"),
    )
    return entry


def audio(url: str) -> Attachment:
    return Attachment(url=url, type="audio/mpeg")


def episode(link: str, pub_date: datetime.datetime) -> PodcastEpisode:
    return PodcastEpisode(
        title=f"Static {link}",
        link=link,
        pub_date=pub_date,
        excerpt="",
        duration="40 min",
        audio_url=None,
    )


class TestContentAggregator(unittest.TestCase):
    def setUp(self):
        self.feed_parser = MagicMock()
        self.feed_parser.fetch.return_value = [
            raw("Older post", "https://s/p/older", day(2)),
            raw("Episode 9: Live", "https://s/p/ep9", day(5), audio("https://s/ep9.mp3"),
                duration="00:30:00"),
            raw("Newest post", "https://s/p/newest", day(9),
                content_snippet="Hello   there &amp; welcome"),
        ]
        self.crawler = MagicMock(spec=ArchiveCrawler)
        self.crawler.crawl.return_value = [
            raw("Archived post", "https://s/p/archived", day(1)),
            raw("Newest post again", "https://s/p/newest", day(9)),
            raw("Episode 2: Old show", "https://s/p/episode-2", day(3)),
        ]

    def test_get_posts_merges_filters_and_sorts(self):
        aggregator = ContentAggregator(self.feed_parser, FEED_URL, self.crawler)
        posts = aggregator.get_posts()

        self.assertEqual(
            [p["link"] for p in posts],
            ["https://s/p/newest", "https://s/p/older", "https://s/p/archived"],
        )
        # Feed entry wins over the archive copy of the same link
        self.assertEqual(posts[0]["title"], "Newest post")
        self.assertEqual(posts[0]["excerpt"], "Hello there & welcome")

        self.feed_parser.fetch.assert_called_once_with(FEED_URL)
        known = self.crawler.crawl.call_args[0][0]
        self.assertIn("https://s/p/ep9", known)

    def test_get_posts_without_crawler(self):
        posts = ContentAggregator(self.feed_parser, FEED_URL).get_posts()
        self.assertEqual(len(posts), 2)

    def test_get_podcasts_fills_gaps_from_static_table(self):
        static = (
            episode("https://s/p/ep9", day(4)),
            episode("https://s/p/ep1", day(1)),
        )
        aggregator = ContentAggregator(
            self.feed_parser, FEED_URL, self.crawler, static_podcasts=static
        )
        podcasts = aggregator.get_podcasts()

        self.assertEqual(
            [p["link"] for p in podcasts], ["https://s/p/ep9", "https://s/p/ep1"]
        )
        live = podcasts[0]
        self.assertEqual(live["title"], "Episode 9: Live")
        self.assertEqual(live["audio_url"], "https://s/ep9.mp3")
        self.assertEqual(live["duration"], "00:30:00")
        self.assertEqual(live["pub_date"], day(5))
        self.crawler.crawl.assert_not_called()

    def test_default_static_table_used_when_feed_empty(self):
        self.feed_parser.fetch.return_value = []
        podcasts = ContentAggregator(self.feed_parser, FEED_URL).get_podcasts()
        self.assertEqual(len(podcasts), 7)
        dates = [p["pub_date"] for p in podcasts]
        self.assertEqual(dates, sorted(dates, reverse=True))

    def test_latest_slices(self):
        aggregator = ContentAggregator(self.feed_parser, FEED_URL, self.crawler)
        self.assertEqual(len(aggregator.get_latest_posts(2)), 2)
        self.assertEqual(len(aggregator.get_latest_podcasts(1)), 1)

    def test_title_strategy_routes_by_title(self):
        self.feed_parser.fetch.return_value = [
            raw("A quiet walk", "https://s/p/walk", day(3), audio("https://s/w.mp3")),
        ]
        aggregator = ContentAggregator(
            self.feed_parser, FEED_URL, strategy=ClassifierStrategy.TITLE
        )
        self.assertEqual(len(aggregator.get_posts()), 1)

    @patch("requests.get")
    def test_feed_failure_yields_empty_posts(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        aggregator = ContentAggregator(
            SubstackFeedParser(),
            FEED_URL,
            ArchiveCrawler("https://stillsmall.substack.com/sitemap.xml"),
        )
        self.assertEqual(aggregator.get_posts(), [])


class TestTransforms(unittest.TestCase):
    def test_missing_fields_get_defaults(self):
        now = datetime.datetime(2025, 5, 5, tzinfo=UTC)
        post = transform_to_post(raw(None, None), now=lambda: now)
        self.assertEqual(post["title"], "Untitled")
        self.assertEqual(post["link"], "")
        self.assertEqual(post["pub_date"], now)
        self.assertEqual(post["excerpt"], "")
        self.assertIsNone(post["image"])

    def test_dedupe_and_sort_is_stable(self):
        items = [
            episode("a", day(1)),
            episode("b", day(3)),
            episode("c", day(3)),
            episode("a", day(9)),
        ]
        result = dedupe_and_sort(items)
        self.assertEqual([i["link"] for i in result], ["b", "c", "a"])
        self.assertEqual(result[2]["pub_date"], day(1))

    def test_entries_without_link_are_not_merged(self):
        items = [episode("", day(2)), episode("", day(1)), episode("x", day(3))]
        result = dedupe_and_sort(items)
        self.assertEqual([i["link"] for i in result], ["x", "", ""])


if __name__ == "__main__":
    unittest.main()
