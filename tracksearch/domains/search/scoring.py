"""
Scoring - Per-record relevance signals.

Features:
- Weighted per-field substring matching (title > description > category)
- Great-circle distance boost for markers
- Recency boost with an oldest-allowed cutoff
- Current-track promotion/demotion
"""

from __future__ import annotations

import math
from datetime import datetime

from tracksearch.config.settings import OLDEST_ALLOWED_TIME
from tracksearch.domains.tracks.models import GeoPosition, Marker, Track

from .models import contains_text

__all__ = [
    "TextScorer",
    "DistanceBooster",
    "RecencyBooster",
    "ContextBooster",
    "haversine_m",
]

EARTH_RADIUS_M = 6_371_008.8


def haversine_m(a: GeoPosition, b: GeoPosition) -> float:
    """Great-circle distance between two positions in metres."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


class TextScorer:
    """
    Sum of field weights for every field containing the query text.

    The weights must be geometrically separated so that a title match alone
    outranks description and category matching together.

    Example:
        >>> scorer = TextScorer()
        >>> scorer.score("Lake loop", "", "hiking", "lake")
        400.0
    """

    def __init__(
        self,
        title_weight: float = 400.0,
        description_weight: float = 200.0,
        category_weight: float = 100.0,
    ) -> None:
        if title_weight <= description_weight + category_weight:
            raise ValueError("title_weight must exceed description_weight + category_weight")
        if not description_weight > category_weight > 0:
            raise ValueError("weights must satisfy description_weight > category_weight > 0")
        self._title_weight = title_weight
        self._description_weight = description_weight
        self._category_weight = category_weight

    def score(
        self,
        title: str | None,
        description: str | None,
        category: str | None,
        query_text: str,
    ) -> float:
        """Return the text score. Zero means the record does not match."""
        total = 0.0
        if contains_text(title, query_text):
            total += self._title_weight
        if contains_text(description, query_text):
            total += self._description_weight
        if contains_text(category, query_text):
            total += self._category_weight
        return total

    def score_track(self, track: Track, query_text: str) -> float:
        return self.score(track.name, track.description, track.category, query_text)

    def score_marker(self, marker: Marker, query_text: str) -> float:
        return self.score(marker.name, marker.description, marker.category, query_text)


class DistanceBooster:
    """Boost that shrinks with distance from the reference position."""

    def __init__(self, max_boost: float = 10.0, scale_m: float = 10_000.0) -> None:
        """
        Args:
            max_boost: Contribution at zero distance
            scale_m: Distance at which the contribution halves
        """
        self._max_boost = max_boost
        self._scale_m = scale_m

    def score(self, reference: GeoPosition | None, position: GeoPosition | None) -> float:
        if reference is None or position is None:
            return 0.0
        distance = haversine_m(reference, position)
        return self._max_boost / (1.0 + distance / self._scale_m)


class RecencyBooster:
    """
    Boost that shrinks with time elapsed since the record's instant.

    Strictly decreasing over instants up to ``now``. Instants after ``now``
    count as elapsed zero and all receive ``max_boost``.
    """

    def __init__(
        self,
        max_boost: float = 10.0,
        scale_s: float = 3_600.0,
        oldest_allowed: datetime = OLDEST_ALLOWED_TIME,
    ) -> None:
        """
        Args:
            max_boost: Contribution for an event happening now
            scale_s: Elapsed seconds at which the contribution halves
            oldest_allowed: Instants at or before this are ignored
        """
        self._max_boost = max_boost
        self._scale_s = scale_s
        self._oldest_allowed = oldest_allowed

    def score(self, now: datetime, instant: datetime | None) -> float:
        if instant is None or instant <= self._oldest_allowed:
            return 0.0
        elapsed = max(0.0, (now - instant).total_seconds())
        return self._max_boost / (1.0 + elapsed / self._scale_s)

    def score_track(self, now: datetime, track: Track) -> float:
        # A track is as recent as the middle of its recording
        return self.score(now, track.statistics.average_time)

    def score_marker(self, now: datetime, marker: Marker) -> float:
        return self.score(now, marker.time)


class ContextBooster:
    """Demotes the current track and promotes markers that belong to it."""

    def __init__(self, track_demotion: float = 25.0, marker_promotion: float = 25.0) -> None:
        self._track_demotion = track_demotion
        self._marker_promotion = marker_promotion

    def score_track(self, current_track_id: int | None, track: Track) -> float:
        if current_track_id is None or track.id != current_track_id:
            return 0.0
        return -self._track_demotion

    def score_marker(self, current_track_id: int | None, marker: Marker) -> float:
        if current_track_id is None or marker.track_id is None:
            return 0.0
        if marker.track_id != current_track_id:
            return 0.0
        return self._marker_promotion
