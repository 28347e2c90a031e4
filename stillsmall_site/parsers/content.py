"""
Text and markup helpers shared by the feed parser and the archive crawler.

Covers entity decoding, tag stripping, excerpt normalization and picking a
representative image for a post.
"""

import html
import re
from typing import Optional

from stillsmall_site.models import RawFeedEntry

ELLIPSIS = "..."
DEFAULT_EXCERPT_LENGTH = 200

# Substack serves icon-sized variants of avatars and emoji with these markers
THUMBNAIL_MARKERS = ("_48x", "_24x")

_TAG_RE = re.compile("<.*?>", re.DOTALL)
_IMG_SRC_RE = re.compile(r'<img[^>]+src="([^"]+)"', re.IGNORECASE)
_TRAILING_PARTIAL_WORD_RE = re.compile(r"\s+\S*$")


def decode_entities(text: Optional[str]) -> str:
    """Decodes numeric and named HTML entities (&#39; &quot; &amp; &lt; &gt; ...)."""
    if not text:
        return ""
    return html.unescape(text)


def strip_html(raw_html: Optional[str]) -> str:
    """Removes HTML tags from a string and collapses whitespace."""
    if not raw_html:
        return ""
    text = re.sub(_TAG_RE, " ", raw_html)
    return " ".join(text.split())


def truncate_at_word(text: str, max_length: int) -> str:
    """
    Cuts text to at most max_length characters without splitting a word and
    appends an ellipsis. Text that already fits is returned unchanged.
    """
    if len(text) <= max_length:
        return text
    truncated = text[:max_length]
    if not text[max_length].isspace():
        # A single overlong token has no boundary to fall back to
        truncated = _TRAILING_PARTIAL_WORD_RE.sub("", truncated) or truncated
    return truncated.rstrip() + ELLIPSIS


def clean_excerpt(
    text: Optional[str], max_length: int = DEFAULT_EXCERPT_LENGTH, decode: bool = True
) -> str:
    """Normalizes a snippet into a single-line excerpt of bounded length."""
    if not text:
        return ""
    if decode:
        text = decode_entities(text)
    cleaned = " ".join(text.split())
    return truncate_at_word(cleaned, max_length)


def extract_image_from_content(content: Optional[str]) -> Optional[str]:
    """Returns the first non-thumbnail <img> source in document order."""
    if not content:
        return None
    for match in _IMG_SRC_RE.finditer(content):
        url = match.group(1)
        if url and not any(marker in url for marker in THUMBNAIL_MARKERS):
            return url
    return None


def resolve_image(entry: RawFeedEntry) -> Optional[str]:
    """
    Picks the image for a post: an image enclosure first, then the first
    qualifying image in the content, then a scraped page's og:image.
    """
    enclosure = entry.get("enclosure")
    if enclosure and (enclosure.get("type") or "").startswith("image/"):
        if enclosure.get("url"):
            return enclosure["url"]
    return extract_image_from_content(entry.get("content")) or entry.get("og_image")
