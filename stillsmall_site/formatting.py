"""
Pure formatting helpers used by the page templates.
"""

import datetime
from typing import Optional, Union

from stillsmall_site.parsers.content import truncate_at_word

DEFAULT_REVIEW_LENGTH = 150


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime.datetime]:
    """Parses an ISO-8601 timestamp or date; naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def _parse_calendar_date(date_string: Optional[str]) -> Optional[datetime.date]:
    """Reads YYYY-MM-DD as a plain calendar date, ignoring any time zone."""
    if not date_string:
        return None
    try:
        year, month, day = (int(part) for part in date_string.strip()[:10].split("-"))
        return datetime.date(year, month, day)
    except ValueError:
        return None


def _long_date(value: datetime.date) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_date(value: Union[datetime.datetime, str, None]) -> str:
    """Formats a publication date as 'October 18, 2023'."""
    if isinstance(value, str):
        value = parse_iso_datetime(value)
    if not value:
        return ""
    return _long_date(value)


def format_book_date(date_string: Optional[str]) -> str:
    """Formats a YYYY-MM-DD read date as 'October 18, 2023'."""
    parsed = _parse_calendar_date(date_string)
    return _long_date(parsed) if parsed else ""


def format_short_date(date_string: Optional[str]) -> str:
    """Formats a YYYY-MM-DD read date as 'Oct 18, 2023'."""
    parsed = _parse_calendar_date(date_string)
    if not parsed:
        return ""
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def truncate_review(
    review: Optional[str], max_length: int = DEFAULT_REVIEW_LENGTH
) -> str:
    if not review:
        return ""
    return truncate_at_word(review, max_length)
