"""
Search suggestions: the shared shape for trail and geocoded results, plus
the merge step that combines them into the list shown under the search bar.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TRAIL = 'trail'
GEOCODED = 'geocoded'
LEGACY = 'legacy'

MAX_SUGGESTIONS = 8
IMMEDIATE_TRAIL_LIMIT = 6  # local matches shown before geocoding returns
GEOCODED_LIMIT = 5
GEOCODED_LIMIT_CROWDED = 3
CROWDED_TRAIL_COUNT = 5
TAG_RENDER_LIMIT = 3


class Suggestion(BaseModel):
    """One displayable search suggestion. `display_name` is the dedup key."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    kind: Literal['trail', 'geocoded', 'legacy']
    name: str
    display_name: str
    description: str | None = None
    location: str | None = None
    difficulty: str | None = None
    distance_label: str | None = None
    elevation_label: str | None = None
    tags: list[str] = Field(default_factory=list)
    coordinates: tuple[float, float] | None = None  # (lon, lat)
    status: Literal['open', 'closed'] | None = None

    @classmethod
    def from_text(cls, text):
        """Wrap a bare string suggestion."""
        return cls(kind=LEGACY, name=text, display_name=text)

    @property
    def display_tags(self):
        return self.tags[:TAG_RENDER_LIMIT]

    def to_dict(self):
        return self.model_dump(by_alias=True)


def geocoded_budget(trail_count):
    """How many geocoded suggestions may follow `trail_count` local matches."""
    if trail_count >= CROWDED_TRAIL_COUNT:
        return GEOCODED_LIMIT_CROWDED
    return GEOCODED_LIMIT


def dedupe_by_display_name(suggestions):
    seen = set()
    unique = []
    for s in suggestions:
        if s.display_name in seen:
            continue
        seen.add(s.display_name)
        unique.append(s)
    return unique


def merge_suggestions(trail_matches, geocoded_matches, limit=MAX_SUGGESTIONS):
    """Trail matches first, then budgeted geocoded ones; first name wins."""
    trail_matches = list(trail_matches)
    budget = geocoded_budget(len(trail_matches))
    combined = trail_matches + list(geocoded_matches)[:budget]
    return dedupe_by_display_name(combined)[:limit]
