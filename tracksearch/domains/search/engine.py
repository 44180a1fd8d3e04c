"""
Relevance Search Engine - Ranks tracks and markers against a text query.

Features:
- Weighted title/description/category matching
- Distance, recency and current-track boosts
- Concurrent per-kind fetch and scoring
- Deterministic merge of tracks and markers into one ranking
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, TypeVar

from tracksearch.config.errors import RecordAccessError, TrackSearchError
from tracksearch.config.settings import Settings, get_settings
from tracksearch.domains.tracks.models import Marker, Track

from .models import ScoreBreakdown, ScoredResult, SearchQuery, TextPredicate
from .scoring import ContextBooster, DistanceBooster, RecencyBooster, TextScorer

if TYPE_CHECKING:
    from .contracts import RecordAccessor

logger = logging.getLogger(__name__)

__all__ = ["RelevanceSearchEngine"]

R = TypeVar("R", Track, Marker)

# Tracks come before markers when totals tie
_KIND_ORDER = {"track": 0, "marker": 1}


def _rank_key(result: ScoredResult) -> tuple[float, int, int]:
    return (-result.score, _KIND_ORDER[result.record.kind], result.record.id)


class RelevanceSearchEngine:
    """
    Stateless ranking of tracks and markers.

    Example:
        >>> engine = RelevanceSearchEngine(repository)
        >>> results = await engine.search(SearchQuery(text="summit", current_track_id=7))
    """

    def __init__(
        self,
        accessor: RecordAccessor,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize search engine.

        Args:
            accessor: Storage collaborator supplying candidate records
            settings: Scoring weights and boosts (defaults to get_settings())
        """
        settings = settings or get_settings()
        self._accessor = accessor
        self._text = TextScorer(
            title_weight=settings.title_weight,
            description_weight=settings.description_weight,
            category_weight=settings.category_weight,
        )
        self._distance = DistanceBooster(
            max_boost=settings.distance_max_boost,
            scale_m=settings.distance_scale_m,
        )
        self._recency = RecencyBooster(
            max_boost=settings.recency_max_boost,
            scale_s=settings.recency_scale_s,
            oldest_allowed=settings.oldest_allowed_time,
        )
        self._context = ContextBooster(
            track_demotion=settings.current_track_demotion,
            marker_promotion=settings.current_track_marker_promotion,
        )

    async def search(self, query: SearchQuery) -> list[ScoredResult]:
        """
        Execute search.

        Args:
            query: Search query with optional position and current track

        Returns:
            Matching tracks and markers sorted by descending score

        Raises:
            RecordAccessError: If fetching either record kind fails
        """
        if not query.text:
            logger.debug("Empty query text, skipping fetch")
            return []

        predicate = query.predicate
        passes = [
            asyncio.ensure_future(
                self._score_kind(
                    "tracks", self._accessor.fetch_matching_tracks, predicate, self._score_track, query
                )
            ),
            asyncio.ensure_future(
                self._score_kind(
                    "markers", self._accessor.fetch_matching_markers, predicate, self._score_marker, query
                )
            ),
        ]
        try:
            track_results, marker_results = await asyncio.gather(*passes)
        except BaseException:
            # Neither pass may outlive the search
            for task in passes:
                task.cancel()
            await asyncio.gather(*passes, return_exceptions=True)
            raise

        results = sorted([*track_results, *marker_results], key=_rank_key)
        if query.limit is not None:
            results = results[: query.limit]

        logger.info(
            "Search: query='%s' -> %d results (tracks=%d, markers=%d)",
            query.text[:50],
            len(results),
            len(track_results),
            len(marker_results),
        )

        return results

    async def _score_kind(
        self,
        kind: str,
        fetch: Callable[[TextPredicate], Awaitable[Sequence[R]]],
        predicate: TextPredicate,
        score: Callable[[SearchQuery, R], ScoreBreakdown],
        query: SearchQuery,
    ) -> list[ScoredResult]:
        """Fetch one record kind, then score it, dropping text non-matches."""
        try:
            records = await fetch(predicate)
        except TrackSearchError:
            raise
        except Exception as e:
            raise RecordAccessError(
                f"Failed to fetch {kind}: {e}",
                details={"kind": kind, "query": predicate.text},
            ) from e

        results = []
        for record in records:
            breakdown = score(query, record)
            if breakdown.text > 0:
                results.append(ScoredResult(record=record, breakdown=breakdown))
        return results

    def _score_track(self, query: SearchQuery, track: Track) -> ScoreBreakdown:
        return ScoreBreakdown(
            text=self._text.score_track(track, query.text),
            recency=self._recency.score_track(query.now, track),
            context=self._context.score_track(query.current_track_id, track),
        )

    def _score_marker(self, query: SearchQuery, marker: Marker) -> ScoreBreakdown:
        return ScoreBreakdown(
            text=self._text.score_marker(marker, query.text),
            distance=self._distance.score(query.position, marker.position),
            recency=self._recency.score_marker(query.now, marker),
            context=self._context.score_marker(query.current_track_id, marker),
        )
