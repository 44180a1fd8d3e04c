"""
Tracks Domain - Recorded tracks and the markers placed on them.

This domain holds the read-only record types that the storage layer
hands to search:
- Track with its timing statistics
- Marker with its position and recorded time
"""

from .models import GeoPosition, Marker, Track, TrackStatistics

__all__ = [
    "GeoPosition",
    "Track",
    "TrackStatistics",
    "Marker",
]
