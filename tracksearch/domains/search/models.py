"""
Search Models - Data types for search domain.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AwareDatetime, BaseModel, Field

from tracksearch.domains.tracks.models import GeoPosition, Marker, Track


def contains_text(value: str | None, text: str) -> bool:
    """Case-insensitive substring test. Empty text never matches."""
    if not text or not value:
        return False
    return text.casefold() in value.casefold()


class TextPredicate(BaseModel):
    """Textual filter handed to record accessors for candidate fetches."""

    text: str

    model_config = {"frozen": True}

    def matches(self, value: str | None) -> bool:
        return contains_text(value, self.text)

    def matches_any(self, *values: str | None) -> bool:
        return any(self.matches(value) for value in values)


class SearchQuery(BaseModel):
    """Search request."""

    text: str
    position: GeoPosition | None = None
    current_track_id: int | None = None
    now: AwareDatetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    limit: int | None = Field(default=None, ge=1)

    model_config = {"frozen": True}

    @property
    def predicate(self) -> TextPredicate:
        return TextPredicate(text=self.text)


class ScoreBreakdown(BaseModel):
    """Per-signal contributions to a result's score."""

    text: float = Field(..., ge=0)
    distance: float = Field(default=0.0, ge=0)
    recency: float = Field(default=0.0, ge=0)
    context: float = 0.0

    model_config = {"frozen": True}

    @property
    def total(self) -> float:
        return self.text + self.distance + self.recency + self.context


RecordPayload = Annotated[Track | Marker, Field(discriminator="kind")]


class ScoredResult(BaseModel):
    """A ranked track or marker. Exactly one record kind per result."""

    record: RecordPayload
    breakdown: ScoreBreakdown

    model_config = {"frozen": True}

    @property
    def score(self) -> float:
        return self.breakdown.total

    @property
    def track(self) -> Track | None:
        return self.record if isinstance(self.record, Track) else None

    @property
    def marker(self) -> Marker | None:
        return self.record if isinstance(self.record, Marker) else None

    def __str__(self) -> str:
        return f"{self.record.kind}#{self.record.id}({self.record.name!r}, score={self.score:.3f})"
