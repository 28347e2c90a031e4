"""
Data models for the Still Small site content pipeline.
"""

from datetime import datetime
from typing import TypedDict, Optional


class Attachment(TypedDict):
    """A media enclosure attached to a feed entry."""

    url: str
    type: str


class RawFeedEntry(TypedDict):
    """Unprocessed feed item or scraped archive page."""

    title: Optional[str]
    link: Optional[str]
    pub_date: Optional[datetime]
    content: Optional[str]
    content_snippet: Optional[str]
    enclosure: Optional[Attachment]
    duration: Optional[str]  # itunes:duration, podcasts only
    artwork: Optional[str]  # itunes:image href
    og_image: Optional[str]  # scraped archive pages only


class Post(TypedDict):
    """Type definition for a written post."""

    title: str
    link: str
    pub_date: datetime
    excerpt: str
    content: str
    image: Optional[str]


class PodcastEpisode(TypedDict):
    """Type definition for a podcast episode."""

    title: str
    link: str
    pub_date: datetime
    excerpt: str
    duration: Optional[str]
    audio_url: Optional[str]


class Book(TypedDict, total=False):
    """A book from the pre-converted reading list (keys mirror books.json)."""

    id: str
    title: str
    author: str
    myRating: int
    averageRating: Optional[float]
    yearPublished: Optional[int]
    dateRead: Optional[str]
    review: Optional[str]
