"""
Sitemap-driven archive crawler.

The RSS feed only carries the most recent entries. Older posts are recovered
by walking the publication's sitemap and scraping Open Graph metadata from
each page that the feed did not already return.
"""

import concurrent.futures
import datetime
import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

import requests
from stillsmall_site.formatting import parse_iso_datetime
from stillsmall_site.models import RawFeedEntry
from stillsmall_site.parsers.content import decode_entities
from stillsmall_site.parsers.rss import DEFAULT_TIMEOUT, USER_AGENT
from stillsmall_site.static_podcasts import STATIC_PODCASTS

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_PATH_PREFIX = "/p/"

# Episode pages backed by the static table, plus non-article pages
DEFAULT_ARCHIVE_DENYLIST: Tuple[str, ...] = tuple(
    ep["link"] for ep in STATIC_PODCASTS
) + ("https://stillsmall.substack.com/p/coming-soon",)

_LOC_RE = re.compile(r"<loc>\s*(.*?)\s*</loc>", re.IGNORECASE | re.DOTALL)
_META_RE = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_ATTR_RE = re.compile(r"""([\w:-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_DATE_FIELD_RES = (
    re.compile(r'"post_date"\s*:\s*"([^"]+)"'),
    re.compile(r'"datePublished"\s*:\s*"([^"]+)"'),
)


def _normalize_url(url: str) -> str:
    return url.strip().rstrip("/")


def extract_meta_tags(page_html: str) -> Dict[str, str]:
    """Maps meta property/name to content. The first occurrence wins."""
    tags: Dict[str, str] = {}
    for tag in _META_RE.findall(page_html):
        attrs = {
            m.group(1).lower(): m.group(2) if m.group(2) is not None else m.group(3)
            for m in _ATTR_RE.finditer(tag)
        }
        key = attrs.get("property") or attrs.get("name")
        content = attrs.get("content")
        if key and content is not None and key not in tags:
            tags[key] = content
    return tags


def extract_publication_date(
    page_html: str, meta: Dict[str, str]
) -> Optional[datetime.datetime]:
    """Reads the JSON-embedded publish date, then the article meta tag."""
    for pattern in _DATE_FIELD_RES:
        match = pattern.search(page_html)
        if match:
            parsed = parse_iso_datetime(match.group(1))
            if parsed:
                return parsed
    return parse_iso_datetime(meta.get("article:published_time"))


def scrape_page(url: str, page_html: str) -> RawFeedEntry:
    """Builds a raw entry from a post page's metadata."""
    page_html = page_html or ""
    meta = extract_meta_tags(page_html)

    title = decode_entities(meta.get("og:title")).strip()
    if not title:
        match = _TITLE_RE.search(page_html)
        title = " ".join(decode_entities(match.group(1)).split()) if match else ""

    # Left encoded; clean_excerpt decodes excerpts once
    description = meta.get("og:description") or meta.get("description") or ""
    pub_date = extract_publication_date(page_html, meta)

    return RawFeedEntry(
        title=title or "Untitled",
        link=url,
        pub_date=pub_date or datetime.datetime.now(datetime.timezone.utc),
        content="",
        content_snippet=description,
        enclosure=None,
        duration=None,
        artwork=None,
        og_image=decode_entities(meta.get("og:image")) or None,
    )


class ArchiveCrawler:
    """Discovers posts missing from the feed via the sitemap."""

    def __init__(
        self,
        sitemap_url: str,
        path_prefix: str = DEFAULT_PATH_PREFIX,
        denylist: Iterable[str] = DEFAULT_ARCHIVE_DENYLIST,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.sitemap_url = sitemap_url
        self.path_prefix = path_prefix
        self.denylist = frozenset(_normalize_url(u) for u in denylist)
        self.batch_size = max(1, batch_size)
        self.timeout = timeout

    def _get(self, url: str) -> str:
        resp = requests.get(
            url, timeout=self.timeout, headers={"User-Agent": USER_AGENT}
        )
        resp.raise_for_status()
        return resp.text

    def extract_post_urls(self, sitemap_xml: str) -> List[str]:
        """Returns post URLs under the path prefix, minus the denylist."""
        urls: List[str] = []
        seen = set()
        for raw in _LOC_RE.findall(sitemap_xml or ""):
            url = decode_entities(raw).strip()
            key = _normalize_url(url)
            if not urlparse(url).path.startswith(self.path_prefix):
                continue
            if key in self.denylist or key in seen:
                continue
            seen.add(key)
            urls.append(url)
        return urls

    def fetch_post_urls(self) -> List[str]:
        """Fetches the sitemap; returns [] when it cannot be read."""
        try:
            sitemap_xml = self._get(self.sitemap_url)
        except requests.RequestException as req_err:
            logger.error(
                "Network error fetching sitemap %s: %s", self.sitemap_url, req_err
            )
            return []
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error reading sitemap %s: %s", self.sitemap_url, e)
            return []
        return self.extract_post_urls(sitemap_xml)

    def fetch_page(self, url: str) -> Optional[RawFeedEntry]:
        """Fetches and scrapes one page. Failures are logged and yield None."""
        try:
            return scrape_page(url, self._get(url))
        except requests.RequestException as req_err:
            logger.warning("Network error fetching archive page %s: %s", url, req_err)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Error scraping archive page %s: %s", url, e)
        return None

    def crawl(self, known_links: Iterable[str] = ()) -> List[RawFeedEntry]:
        """
        Scrapes every sitemap post not in known_links.

        Pages are requested in batches of batch_size; a batch is fully
        settled before the next one starts.
        """
        known = {_normalize_url(link) for link in known_links if link}
        urls = [u for u in self.fetch_post_urls() if _normalize_url(u) not in known]
        if not urls:
            return []

        logger.info("Crawling %d archive pages from %s", len(urls), self.sitemap_url)
        entries: List[RawFeedEntry] = []
        for i in range(0, len(urls), self.batch_size):
            batch = urls[i : i + self.batch_size]
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=len(batch)
            ) as executor:
                futures = [executor.submit(self.fetch_page, url) for url in batch]
            for future, url in zip(futures, batch):
                try:
                    entry = future.result()
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    logger.warning("%s generated an exception: %s", url, exc)
                    continue
                if entry is not None:
                    entries.append(entry)

        logger.info("Recovered %d archive pages.", len(entries))
        return entries
