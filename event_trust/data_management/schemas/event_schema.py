"""Candidate event schema and source confidence tiers.

Candidates are produced upstream by scrapers, recurrence templates and
social-media inference. They are immutable here: the pipeline annotates
and filters them, never edits them.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_KEY_SEPARATOR = re.compile(r"[^a-z0-9]+")


class SourceConfidence(str, Enum):
    """Coarse trust tier assigned to a source name.

    HIGH: Verified scrapes, real calendars, hand-curated listings.
    MEDIUM: Unknown sources (benefit of the doubt).
    LOW: Generators that emit generic, unconfirmed recurrence.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def normalize_key_part(part: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim '-'."""
    return _KEY_SEPARATOR.sub("-", part.lower()).strip("-")


def cache_key(*parts: str) -> str:
    """Composite cache key from normalized parts joined by '|'."""
    return "|".join(normalize_key_part(p) for p in parts)


class EventCandidate(BaseModel):
    """A prospective event from an untrusted upstream source.

    Accepts snake_case or camelCase keys. The nested ``source: {name, url}``
    shape used by published events is flattened into source_name/source_url.
    """

    title: str = Field(..., min_length=1, description="Event title")
    start_at: datetime = Field(..., description="Start timestamp (ISO 8601)")
    end_at: Optional[datetime] = Field(default=None, description="End timestamp")
    venue_name: Optional[str] = Field(default=None, description="Venue name")
    address: Optional[str] = Field(default=None, description="Street address")
    neighborhood: Optional[str] = Field(default=None, description="Neighborhood")
    city: str = Field(default="", description="City the event is listed under")
    category: str = Field(default="", description="Upstream category label")
    tags: list[str] = Field(default_factory=list, description="Tag set")
    price_label: Optional[str] = Field(default=None, description="Free, $, $$, $$$")
    price_amount: Optional[float] = Field(default=None, description="Numeric price")
    is_outdoor: bool = Field(default=False, description="Outdoor event")
    description: str = Field(default="", description="Free-text description")
    source_name: str = Field(..., description="Name of the producing source")
    source_url: Optional[str] = Field(default=None, description="Listing URL")
    ticket_url: Optional[str] = Field(default=None, description="Ticketing URL")
    image: Optional[str] = Field(default=None, description="Image URL")
    recurring: bool = Field(default=False, description="Generated from a recurrence template")
    recurrence_pattern: Optional[str] = Field(default=None, description="Template descriptor")

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "title": "Jazz Night with the Miami Quartet",
                    "startAt": "2026-03-14T20:00:00-05:00",
                    "venueName": "Lagniappe",
                    "neighborhood": "Midtown",
                    "city": "Miami",
                    "category": "Music",
                    "tags": ["live-music", "jazz"],
                    "description": "An evening of standards and originals.",
                    "sourceName": "Music Venues",
                    "sourceUrl": "https://example.com/jazz-night",
                }
            ]
        },
    )

    @model_validator(mode="before")
    @classmethod
    def flatten_source(cls, data: Any) -> Any:
        """Lift a nested ``source`` object into source_name/source_url."""
        if isinstance(data, dict) and isinstance(data.get("source"), dict):
            data = dict(data)
            source = data.pop("source")
            data.setdefault("sourceName", source.get("name", ""))
            if source.get("url"):
                data.setdefault("sourceUrl", source["url"])
        if isinstance(data, dict) and data.get("description") is None:
            data = dict(data)
            data["description"] = ""
        return data

    @property
    def date_key(self) -> str:
        """Date-only part of start_at, as listed (no timezone conversion)."""
        return self.start_at.date().isoformat()

    @property
    def cache_key(self) -> str:
        """Verification cache key: (title, venue, date)."""
        return cache_key(self.title, self.venue_name or "", self.date_key)
