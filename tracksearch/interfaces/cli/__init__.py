"""
CLI Interface - Command-line tools for TrackSearch.

Provides commands for:
- Database setup
- Search queries
"""

from .main import app, main

__all__ = ["app", "main"]
