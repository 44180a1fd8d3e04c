"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from tracksearch.domains.tracks.models import Marker, Track

from .models import ScoredResult, SearchQuery, TextPredicate


@runtime_checkable
class RecordAccessor(Protocol):
    """
    Contract for the storage collaborator supplying search candidates.

    Implementations may over-include but must return every record with at
    least one field matching the predicate. Order is irrelevant.
    """

    async def fetch_matching_tracks(self, predicate: TextPredicate) -> Sequence[Track]:
        """Return tracks whose name, description or category may match."""
        ...

    async def fetch_matching_markers(self, predicate: TextPredicate) -> Sequence[Marker]:
        """Return markers whose name, description or category may match."""
        ...


@runtime_checkable
class SearchEngine(Protocol):
    """Contract for search implementations."""

    async def search(
        self,
        query: SearchQuery,
    ) -> list[ScoredResult]:
        """Execute search and return results in descending score order."""
        ...
