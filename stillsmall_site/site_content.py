"""
Still Small site content.

Entry point for the rendering layer: fetches the Substack feed, recovers
older posts from the sitemap, merges in the static episode table and exposes
the reading list. Running the module writes a JSON snapshot of everything the
templates need.
"""

import datetime
import json
import logging
import os
from typing import Any, Dict, List, Optional, cast

from stillsmall_site.models import Book, PodcastEpisode, Post
from stillsmall_site.parsers.classifier import ClassifierStrategy
from stillsmall_site.parsers.rss import SubstackFeedParser
from stillsmall_site.parsers.sitemap import DEFAULT_ARCHIVE_DENYLIST, ArchiveCrawler
from stillsmall_site.services.aggregator import ContentAggregator
from stillsmall_site.services.books import BookCatalog, load_books


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DEFAULT_CONFIG: Dict[str, Any] = {
    "feed_url": "https://stillsmall.substack.com/feed",
    "sitemap_url": "https://stillsmall.substack.com/sitemap.xml",
    "archive_enabled": True,
    "archive_path_prefix": "/p/",
    "archive_denylist": list(DEFAULT_ARCHIVE_DENYLIST),
    "batch_size": 10,
    "request_timeout": 10,
    "podcast_detection": "combined",
    "books_path": "data/books.json",
    "output_path": "site_content.json",
}

# Env var -> config key
ENV_OVERRIDES = {
    "STILLSMALL_FEED_URL": "feed_url",
    "STILLSMALL_SITEMAP_URL": "sitemap_url",
    "STILLSMALL_BOOKS_PATH": "books_path",
    "STILLSMALL_OUTPUT_PATH": "output_path",
    "STILLSMALL_PODCAST_DETECTION": "podcast_detection",
}


def load_config(config_filename: str = "config.json") -> Dict[str, Any]:
    """Loads configuration from a JSON file, then applies env overrides."""
    # Build absolute path relative to this module
    config_path = os.path.join(BASE_DIR, config_filename)
    config = dict(DEFAULT_CONFIG)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config.update(json.load(f))
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using defaults.", config_path)
    except json.JSONDecodeError as e:
        logger.error("Invalid config file %s: %s. Using defaults.", config_path, e)

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value
    return config


def resolve_path(path: str) -> str:
    """Relative data paths are resolved against the package directory."""
    if os.path.isabs(path):
        return path
    return os.path.join(BASE_DIR, path)


CONFIG: Dict[str, Any] = load_config()
BOOKS: BookCatalog = BookCatalog(load_books(resolve_path(CONFIG["books_path"])))


def build_aggregator(config: Optional[Dict[str, Any]] = None) -> ContentAggregator:
    """Wires the feed parser and archive crawler from configuration."""
    config = config if config is not None else CONFIG
    timeout = float(config.get("request_timeout", 10))

    crawler = None
    if config.get("archive_enabled", True) and config.get("sitemap_url"):
        crawler = ArchiveCrawler(
            config["sitemap_url"],
            path_prefix=config.get("archive_path_prefix", "/p/"),
            denylist=config.get("archive_denylist", DEFAULT_ARCHIVE_DENYLIST),
            batch_size=int(config.get("batch_size", 10)),
            timeout=timeout,
        )

    return ContentAggregator(
        SubstackFeedParser(timeout=timeout),
        config["feed_url"],
        archive_crawler=crawler,
        strategy=ClassifierStrategy.from_name(config.get("podcast_detection")),
    )


def get_posts() -> List[Post]:
    return build_aggregator().get_posts()


def get_podcasts() -> List[PodcastEpisode]:
    return build_aggregator().get_podcasts()


def get_latest_posts(count: int = 6) -> List[Post]:
    return build_aggregator().get_latest_posts(count)


def get_latest_podcasts(count: int = 3) -> List[PodcastEpisode]:
    return build_aggregator().get_latest_podcasts(count)


def get_books() -> List[Book]:
    return BOOKS.get_books()


def get_featured_books(count: int = 6) -> List[Book]:
    return BOOKS.get_featured_books(count)


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_snapshot() -> Dict[str, Any]:
    """Collects everything the templates render in one pass."""
    aggregator = build_aggregator()
    return {
        "generated_at": datetime.datetime.now(datetime.timezone.utc),
        "posts": aggregator.get_posts(),
        "podcasts": aggregator.get_podcasts(),
        "books": get_books(),
        "featured_books": get_featured_books(),
    }


def main():
    """Main execution entry point."""
    snapshot = build_snapshot()
    output_path = cast(str, CONFIG["output_path"])

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2, ensure_ascii=False, default=_json_default)

    logger.info(
        "Wrote %d posts, %d podcasts and %d books to %s",
        len(snapshot["posts"]),
        len(snapshot["podcasts"]),
        len(snapshot["books"]),
        output_path,
    )


if __name__ == "__main__":
    main()
