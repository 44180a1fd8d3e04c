"""SQLite adapter - Track and marker storage."""

from .repository import SQLiteTrackRepository

__all__ = ["SQLiteTrackRepository"]
