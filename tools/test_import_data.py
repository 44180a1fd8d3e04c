"""Tests for the snapshot import tool."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from import_data import import_snapshot
from tracksearch.adapters import SQLiteTrackRepository
from tracksearch.domains.search import TextPredicate


@pytest.fixture
async def repo(tmp_path: Path):
    """Create a test repository with temporary database."""
    repo = SQLiteTrackRepository(tmp_path / "import.db")
    await repo.initialize()
    yield repo
    await repo.close()


async def test_import_tracks_and_markers(repo: SQLiteTrackRepository):
    snapshot = {
        "tracks": [
            {
                "ref": "t1",
                "name": "Morning run",
                "category": "running",
                "start_time": "2024-05-01T08:00:00+00:00",
                "stop_time": "2024-05-01T09:00:00+00:00",
            }
        ],
        "markers": [
            {
                "track": "t1",
                "name": "Bridge",
                "latitude": 47.37,
                "longitude": 8.54,
                "time": "2024-05-01T08:20:00+00:00",
            }
        ],
    }

    stats = await import_snapshot(snapshot, repo)

    assert stats == {"tracks": 1, "markers": 1, "skipped": 0}
    [track] = await repo.fetch_matching_tracks(TextPredicate(text="morning"))
    assert track.category == "running"
    assert track.statistics.stop_time == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    [marker] = await repo.fetch_matching_markers(TextPredicate(text="bridge"))
    assert marker.track_id == track.id
    assert marker.time == datetime(2024, 5, 1, 8, 20, tzinfo=timezone.utc)


async def test_import_skips_invalid_items(repo: SQLiteTrackRepository):
    """Bad records are skipped and counted; the rest still import."""
    snapshot = {
        "tracks": [
            {"ref": "ok", "name": "Valid"},
            {
                "ref": "reversed",
                "name": "Stops before it starts",
                "start_time": "2024-05-01T09:00:00+00:00",
                "stop_time": "2024-05-01T08:00:00+00:00",
            },
        ],
        "markers": [
            {"track": "missing", "name": "Unknown track", "latitude": 1.0, "longitude": 1.0},
            {"track": "reversed", "name": "Skipped owner", "latitude": 1.0, "longitude": 1.0},
            {
                "track": "ok",
                "name": "Naive time",
                "latitude": 1.0,
                "longitude": 1.0,
                "time": "2024-05-01T08:20:00",
            },
            {"track": "ok", "name": "No position"},
            {"track": "ok", "name": "Kept", "latitude": 1.0, "longitude": 1.0},
        ],
    }

    stats = await import_snapshot(snapshot, repo)

    assert stats == {"tracks": 1, "markers": 1, "skipped": 5}
    assert await repo.get_track_count() == 1
    assert await repo.get_marker_count() == 1


async def test_import_empty_snapshot(repo: SQLiteTrackRepository):
    assert await import_snapshot({}, repo) == {"tracks": 0, "markers": 0, "skipped": 0}
