"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    ErrorCode,
    RecordAccessError,
    StorageError,
    TrackSearchError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "TrackSearchError",
    "StorageError",
    "RecordAccessError",
]
