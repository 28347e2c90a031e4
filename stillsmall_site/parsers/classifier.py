"""
Podcast/post classification for feed entries.

Substack mixes podcast episodes and written posts in one feed. The audio
enclosure is the reliable signal; title patterns are kept for entries that
carry no attachment metadata (e.g. pages recovered from the sitemap).
"""

import enum
import logging
import re
from typing import Optional, Union

from stillsmall_site.models import RawFeedEntry

logger = logging.getLogger(__name__)

HEADPHONE_EMOJI = "\U0001F3A7"

_EPISODE_RE = re.compile(r"episode\s*\d", re.IGNORECASE)
_NUMBERED_TITLE_RE = re.compile(r"^\d+\.\s")
_LEADING_EMOJI_RE = re.compile("^" + HEADPHONE_EMOJI + r"\s*")


class ClassifierStrategy(enum.Enum):
    """How to decide whether an entry is a podcast episode."""

    TITLE = "title"
    ATTACHMENT = "attachment"
    COMBINED = "combined"

    @classmethod
    def from_name(
        cls, name: Union[str, "ClassifierStrategy", None]
    ) -> "ClassifierStrategy":
        """Resolves a configured strategy name, defaulting to COMBINED."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            logger.warning("Unknown podcast detection %r. Using 'combined'.", name)
            return cls.COMBINED


def title_looks_like_episode(title: Optional[str]) -> bool:
    """Matches the emoji marker, 'Episode N' or a leading 'N. ' prefix."""
    title = title or ""
    return (
        HEADPHONE_EMOJI in title
        or bool(_EPISODE_RE.search(title))
        or bool(_NUMBERED_TITLE_RE.match(title))
    )


def attachment_type(entry: RawFeedEntry) -> str:
    """Returns the enclosure media type, or an empty string."""
    enclosure = entry.get("enclosure")
    if not enclosure:
        return ""
    return (enclosure.get("type") or "").strip().lower()


def has_audio_attachment(entry: RawFeedEntry) -> bool:
    return attachment_type(entry).startswith("audio/")


def is_podcast_episode(
    entry: RawFeedEntry, strategy: ClassifierStrategy = ClassifierStrategy.COMBINED
) -> bool:
    """Decides whether a raw entry is a podcast episode."""
    if strategy is ClassifierStrategy.TITLE:
        return title_looks_like_episode(entry.get("title"))
    if strategy is ClassifierStrategy.ATTACHMENT:
        return has_audio_attachment(entry)
    if attachment_type(entry):
        return has_audio_attachment(entry)
    return title_looks_like_episode(entry.get("title"))


def clean_podcast_title(title: Optional[str]) -> str:
    """Drops the leading headphone emoji Substack puts on episode titles."""
    if not title:
        return "Untitled Episode"
    return _LEADING_EMOJI_RE.sub("", title).strip() or "Untitled Episode"
