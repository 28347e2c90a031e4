"""Unit tests for the site_content entry point."""

import datetime
import json
import os
import tempfile
import unittest
from unittest.mock import mock_open, patch

import requests

from stillsmall_site import site_content
from stillsmall_site.parsers.classifier import ClassifierStrategy
from stillsmall_site.models import Post
from stillsmall_site.static_podcasts import STATIC_PODCASTS


class TestConfig(unittest.TestCase):
    @patch(
        "builtins.open",
        new_callable=mock_open,
        read_data='{"feed_url": "https://example.com/feed", "batch_size": 5}',
    )
    def test_load_config_merges_defaults(self, mock_file):
        config = site_content.load_config("dummy_config.json")
        self.assertEqual(config["feed_url"], "https://example.com/feed")
        self.assertEqual(config["batch_size"], 5)
        self.assertEqual(config["podcast_detection"], "combined")

    @patch.dict(os.environ, {"STILLSMALL_FEED_URL": "https://env.example.com/feed"})
    def test_env_override(self):
        config = site_content.load_config("does_not_exist.json")
        self.assertEqual(config["feed_url"], "https://env.example.com/feed")

    def test_default_denylist_covers_static_episodes(self):
        denylist = site_content.DEFAULT_CONFIG["archive_denylist"]
        for ep in STATIC_PODCASTS:
            self.assertIn(ep["link"], denylist)
        self.assertIn("https://stillsmall.substack.com/p/coming-soon", denylist)

        config = dict(site_content.DEFAULT_CONFIG)
        crawler = site_content.build_aggregator(config).archive_crawler
        static_link = STATIC_PODCASTS[0]["link"]
        sitemap = (
            f"<urlset><url><loc>{static_link}</loc></url>"
            "<url><loc>https://stillsmall.substack.com/p/an-essay</loc></url></urlset>"
        )
        self.assertEqual(
            crawler.extract_post_urls(sitemap),
            ["https://stillsmall.substack.com/p/an-essay"],
        )

    def test_build_aggregator_from_config(self):
        config = dict(site_content.DEFAULT_CONFIG)
        config.update({"archive_enabled": False, "podcast_detection": "title"})
        aggregator = site_content.build_aggregator(config)
        self.assertIsNone(aggregator.archive_crawler)
        self.assertIs(aggregator.strategy, ClassifierStrategy.TITLE)

        config["archive_enabled"] = True
        aggregator = site_content.build_aggregator(config)
        self.assertEqual(aggregator.archive_crawler.batch_size, 10)


class TestMain(unittest.TestCase):
    @patch("stillsmall_site.site_content.build_aggregator")
    def test_main_writes_snapshot(self, mock_build):
        post = Post(
            title="On small things",
            link="https://s/p/on-small-things",
            pub_date=datetime.datetime(2024, 1, 5, tzinfo=datetime.timezone.utc),
            excerpt="",
            content="",
            image=None,
        )
        aggregator = mock_build.return_value
        aggregator.get_posts.return_value = [post]
        aggregator.get_podcasts.return_value = []

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out.json")
            with patch.dict(site_content.CONFIG, {"output_path": path}):
                site_content.main()
            with open(path, "r", encoding="utf-8") as f:
                snapshot = json.load(f)

        self.assertEqual(snapshot["posts"][0]["link"], "https://s/p/on-small-things")
        self.assertEqual(snapshot["posts"][0]["pub_date"], "2024-01-05T00:00:00+00:00")
        self.assertEqual(snapshot["podcasts"], [])
        self.assertIn("generated_at", snapshot)

    @patch("requests.get", side_effect=requests.ConnectionError("down"))
    def test_get_posts_never_raises(self, mock_get):
        self.assertEqual(site_content.get_posts(), [])


if __name__ == "__main__":
    unittest.main()
