"""
Adapters - External service integrations.

Storage is wrapped here to isolate domains from persistence details.
"""

from .sqlite import SQLiteTrackRepository

__all__ = [
    "SQLiteTrackRepository",
]
