"""
Reading list service.

This module provides the BookCatalog class over the pre-converted books.json
export, plus the cover and marketplace link builders used by the reading page.
"""

import json
import logging
import re
from typing import List, Optional
from urllib.parse import quote

from stillsmall_site.models import Book

logger = logging.getLogger(__name__)

OPEN_LIBRARY_COVER_BASE = "https://covers.openlibrary.org/b"
AMAZON_SEARCH_URL = "https://www.amazon.com/s"
MIN_REVIEW_LENGTH = 20
_EMPTY_REVIEWS = {"no notes", "no notes."}

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"
_NON_WORD_RE = re.compile(r"[^\w\s]", re.ASCII)


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def load_books(path: str) -> List[Book]:
    """Reads the books.json export. Returns [] when it is missing or invalid."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("Books file not found at %s. Reading list is empty.", path)
        return []
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Failed to read books file %s: %s", path, e)
        return []

    books = data.get("books") if isinstance(data, dict) else None
    if not isinstance(books, list):
        logger.error("Books file %s has no 'books' list.", path)
        return []
    logger.info(
        "Loaded %d books (last updated %s).", len(books), data.get("lastUpdated")
    )
    return [book for book in books if isinstance(book, dict)]


def has_substantial_review(review: Optional[str]) -> bool:
    """Filters out empty and placeholder reviews."""
    if not review:
        return False
    trimmed = review.strip().lower()
    if len(trimmed) < MIN_REVIEW_LENGTH:
        return False
    return trimmed not in _EMPTY_REVIEWS


class BookCatalog:
    """Read-only view over the reading list."""

    def __init__(self, books: List[Book]):
        self._books = tuple(books)

    def get_books(self) -> List[Book]:
        return list(self._books)

    def get_all_books(self) -> List[Book]:
        return self.get_books()

    def get_featured_books(self, count: int = 6) -> List[Book]:
        """Read books with a real review, in file order."""
        featured = [
            book
            for book in self._books
            if book.get("dateRead") and has_substantial_review(book.get("review"))
        ]
        return featured[:count]


def get_open_library_cover_url(title: str, author: str, size: str = "M") -> str:
    query = encode_uri_component(f"{title} {author}")
    return f"{OPEN_LIBRARY_COVER_BASE}/olid/{query}-{size}.jpg"


def get_open_library_search_cover_url(title: str, size: str = "M") -> str:
    """Title-based cover lookup; punctuation is dropped before encoding."""
    clean_title = _NON_WORD_RE.sub("", title).lower()
    return f"{OPEN_LIBRARY_COVER_BASE}/title/{encode_uri_component(clean_title)}-{size}.jpg"


def get_amazon_search_url(title: str, author: str) -> str:
    query = encode_uri_component(f"{title} {author}")
    return f"{AMAZON_SEARCH_URL}?k={query}&i=stripbooks"
