"""
SQLite Repository - Track and marker storage.

Features:
- Async operations via aiosqlite
- Candidate fetches for search using the same case-insensitive
  containment rule as the text scorer
- Markers reference their owning track by foreign key
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from tracksearch.config.errors import ErrorCode, StorageError
from tracksearch.domains.search.models import TextPredicate, contains_text
from tracksearch.domains.tracks.models import GeoPosition, Marker, Track, TrackStatistics

logger = logging.getLogger(__name__)

__all__ = ["SQLiteTrackRepository"]

_TEXT_FIELDS_MATCH = (
    "text_match(name, :text) OR text_match(description, :text) OR text_match(category, :text)"
)


def _text_match(value: str | None, text: str) -> int:
    return int(contains_text(value, text))


def _to_db_time(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _from_db_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_track(row: aiosqlite.Row) -> Track:
    return Track(
        id=row["id"],
        name=row["name"] or "",
        description=row["description"] or "",
        category=row["category"] or "",
        statistics=TrackStatistics(
            start_time=_from_db_time(row["start_time"]),
            stop_time=_from_db_time(row["stop_time"]),
            total_distance_m=row["total_distance_m"] or 0.0,
            total_time_s=row["total_time_s"] or 0.0,
        ),
    )


def _row_to_marker(row: aiosqlite.Row) -> Marker:
    return Marker(
        id=row["id"],
        track_id=row["track_id"],
        name=row["name"] or "",
        description=row["description"] or "",
        category=row["category"] or "",
        position=GeoPosition(latitude=row["latitude"], longitude=row["longitude"]),
        time=_from_db_time(row["time"]),
    )


class SQLiteTrackRepository:
    """
    SQLite repository for tracks and markers.

    Implements the search ``RecordAccessor`` contract.

    Example:
        >>> repo = SQLiteTrackRepository("data/tracksearch.db")
        >>> await repo.initialize()
        >>> track_id = await repo.insert_track(name="Morning run", category="running")
        >>> tracks = await repo.fetch_matching_tracks(TextPredicate(text="run"))
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: aiosqlite.Connection | None = None
        self._connect_lock = asyncio.Lock()

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection. Concurrent callers share one."""
        if self._connection is not None:
            return self._connection

        async with self._connect_lock:
            if self._connection is None:
                try:
                    conn = await aiosqlite.connect(str(self.db_path))
                except Exception as e:
                    raise StorageError(
                        f"Cannot open database: {self.db_path}", details={"error": str(e)}
                    ) from e
                conn.row_factory = aiosqlite.Row
                await conn.execute("PRAGMA foreign_keys = ON")
                await conn.create_function("text_match", 2, _text_match, deterministic=True)
                self._connection = conn
        return self._connection

    async def initialize(self) -> None:
        """Initialize database schema."""
        conn = await self._get_connection()

        await conn.executescript("""
            -- Tracks table
            CREATE TABLE IF NOT EXISTS tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL DEFAULT '',
                description TEXT NOT NULL DEFAULT '',
                category TEXT NOT NULL DEFAULT '',
                start_time TEXT,
                stop_time TEXT,
                total_distance_m REAL NOT NULL DEFAULT 0,
                total_time_s REAL NOT NULL DEFAULT 0
            );

            -- Markers table
            CREATE TABLE IF NOT EXISTS markers (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                track_id INTEGER REFERENCES tracks(id) ON DELETE CASCADE,
                name TEXT NOT NULL DEFAULT '',
                description TEXT NOT NULL DEFAULT '',
                category TEXT NOT NULL DEFAULT '',
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                time TEXT
            );

            -- Indexes
            CREATE INDEX IF NOT EXISTS idx_markers_track_id ON markers(track_id);
        """)

        await conn.commit()
        logger.info("Database initialized: %s", self.db_path)

    async def insert_track(
        self,
        name: str = "",
        description: str = "",
        category: str = "",
        start_time: datetime | None = None,
        stop_time: datetime | None = None,
        total_distance_m: float = 0.0,
        total_time_s: float = 0.0,
    ) -> int:
        """
        Insert a track.

        Returns:
            Track ID
        """
        # Validate before writing
        TrackStatistics(
            start_time=start_time,
            stop_time=stop_time,
            total_distance_m=total_distance_m,
            total_time_s=total_time_s,
        )
        return await self._insert(
            "tracks",
            """
            INSERT INTO tracks
            (name, description, category, start_time, stop_time, total_distance_m, total_time_s)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                name,
                description,
                category,
                _to_db_time(start_time),
                _to_db_time(stop_time),
                total_distance_m,
                total_time_s,
            ),
        )

    async def insert_marker(
        self,
        track_id: int | None,
        position: GeoPosition,
        name: str = "",
        description: str = "",
        category: str = "",
        time: datetime | None = None,
    ) -> int:
        """
        Insert a marker.

        Returns:
            Marker ID
        """
        return await self._insert(
            "markers",
            """
            INSERT INTO markers
            (track_id, name, description, category, latitude, longitude, time)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                track_id,
                name,
                description,
                category,
                position.latitude,
                position.longitude,
                _to_db_time(time),
            ),
        )

    async def _insert(self, table: str, sql: str, params: tuple[Any, ...]) -> int:
        conn = await self._get_connection()
        try:
            cursor = await conn.execute(sql, params)
            await conn.commit()
        except sqlite3.Error as e:
            await conn.rollback()
            raise StorageError(
                f"Failed to write to {table}: {e}",
                details={"table": table},
                code=ErrorCode.STORAGE_WRITE_FAILED,
            ) from e
        return cursor.lastrowid

    async def get_track(self, track_id: int) -> Track | None:
        """Get track by ID."""
        conn = await self._get_connection()

        cursor = await conn.execute("SELECT * FROM tracks WHERE id = ?", (track_id,))
        row = await cursor.fetchone()

        if row:
            return _row_to_track(row)
        return None

    async def get_marker(self, marker_id: int) -> Marker | None:
        """Get marker by ID."""
        conn = await self._get_connection()

        cursor = await conn.execute("SELECT * FROM markers WHERE id = ?", (marker_id,))
        row = await cursor.fetchone()

        if row:
            return _row_to_marker(row)
        return None

    async def fetch_matching_tracks(self, predicate: TextPredicate) -> list[Track]:
        """Tracks with at least one text field containing the predicate text."""
        rows = await self._select_matching("tracks", predicate)
        return [_row_to_track(row) for row in rows]

    async def fetch_matching_markers(self, predicate: TextPredicate) -> list[Marker]:
        """Markers with at least one text field containing the predicate text."""
        rows = await self._select_matching("markers", predicate)
        return [_row_to_marker(row) for row in rows]

    async def _select_matching(self, table: str, predicate: TextPredicate) -> list[Any]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            f"SELECT * FROM {table} WHERE {_TEXT_FIELDS_MATCH}",
            {"text": predicate.text},
        )
        return list(await cursor.fetchall())

    async def get_track_count(self) -> int:
        """Get total track count."""
        return await self._count("tracks")

    async def get_marker_count(self) -> int:
        """Get total marker count."""
        return await self._count("markers")

    async def _count(self, table: str) -> int:
        conn = await self._get_connection()
        cursor = await conn.execute(f"SELECT COUNT(*) FROM {table}")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
