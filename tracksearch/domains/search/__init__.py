"""
Search Domain - Relevance ranking over tracks and markers.

This domain handles:
- Weighted text matching on title, description and category
- Distance and recency boosting
- Current-track promotion/demotion
- Merging tracks and markers into one ranking
"""

from .contracts import RecordAccessor, SearchEngine
from .engine import RelevanceSearchEngine
from .models import ScoreBreakdown, ScoredResult, SearchQuery, TextPredicate
from .scoring import ContextBooster, DistanceBooster, RecencyBooster, TextScorer

__all__ = [
    # Contracts
    "RecordAccessor",
    "SearchEngine",
    # Models
    "SearchQuery",
    "TextPredicate",
    "ScoreBreakdown",
    "ScoredResult",
    # Scoring
    "TextScorer",
    "DistanceBooster",
    "RecencyBooster",
    "ContextBooster",
    # Implementations
    "RelevanceSearchEngine",
]
