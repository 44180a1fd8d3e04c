"""
TrackSearch - Relevance ranking for recorded tracks and their markers.

Example:
    >>> from tracksearch.domains.search import RelevanceSearchEngine, SearchQuery
    >>> engine = RelevanceSearchEngine(repository)
    >>> results = await engine.search(SearchQuery(text="lake"))
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
