"""
Hand-maintained episodes from the 2023 season that are no longer in the feed.

The aggregator only uses these to fill gaps: live feed entries with the same
link always take precedence.
"""

import datetime
from typing import Tuple

from stillsmall_site.models import PodcastEpisode


def _day(year: int, month: int, day: int) -> datetime.datetime:
    return datetime.datetime(year, month, day, tzinfo=datetime.timezone.utc)


STATIC_PODCASTS: Tuple[PodcastEpisode, ...] = (
    PodcastEpisode(
        title="Maintaining Awe and Wonder with Sara Kaiser",
        link="https://stillsmall.substack.com/p/7-maintaining-awe-and-wonder",
        pub_date=_day(2023, 10, 18),
        excerpt=(
            "A conversation exploring nature's significance, intuitive listening, "
            "imagination and creativity."
        ),
        duration="61 min",
        audio_url=None,
    ),
    PodcastEpisode(
        title="The Unconventional Route with Chris Blachut",
        link="https://stillsmall.substack.com/p/6-the-unconventional-route",
        pub_date=_day(2023, 9, 27),
        excerpt="Exploring the path less traveled and creating your own route in life.",
        duration="55 min",
        audio_url=None,
    ),
    PodcastEpisode(
        title="Creativity and Connection with Rachael Maier",
        link="https://stillsmall.substack.com/p/episode-5-creativity-and-connection",
        pub_date=_day(2023, 9, 13),
        excerpt="A discussion about the intersection of creativity and human connection.",
        duration="52 min",
        audio_url=None,
    ),
    PodcastEpisode(
        title="Prioritizing Relationships with Jason Lakis",
        link="https://stillsmall.substack.com/p/episode-4-prioritizing-relationships",
        pub_date=_day(2023, 8, 30),
        excerpt="How to put relationships first in a world that prioritizes productivity.",
        duration="48 min",
        audio_url=None,
    ),
    PodcastEpisode(
        title="Middle School Feelings with Rachel",
        link="https://stillsmall.substack.com/p/episode-3-middle-school-feelings",
        pub_date=_day(2023, 8, 16),
        excerpt="Revisiting the emotions and experiences of middle school years.",
        duration="45 min",
        audio_url=None,
    ),
    PodcastEpisode(
        title="Mother-Daughter Relationships with Elise Porter",
        link="https://stillsmall.substack.com/p/episode-2-mother-daughter-relationships",
        pub_date=_day(2023, 8, 2),
        excerpt="Exploring the complex and beautiful bond between mothers and daughters.",
        duration="50 min",
        audio_url=None,
    ),
    PodcastEpisode(
        title="The Decision to Have Children with Allison Doering",
        link="https://stillsmall.substack.com/p/episode-1-the-decision-to-have-children",
        pub_date=_day(2023, 7, 19),
        excerpt="A thoughtful conversation about the decision to become a parent.",
        duration="47 min",
        audio_url=None,
    ),
)
