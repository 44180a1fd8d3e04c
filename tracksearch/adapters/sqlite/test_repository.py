"""Tests for SQLite Track Repository."""

import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

import aiosqlite
import pytest

from tracksearch.config import ErrorCode, Settings, StorageError
from tracksearch.domains.search import RecordAccessor, RelevanceSearchEngine, SearchQuery, TextPredicate
from tracksearch.domains.tracks import GeoPosition

from .repository import SQLiteTrackRepository

HERE = GeoPosition(latitude=47.37, longitude=8.54)
START = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
async def repo(tmp_path: Path):
    """Create a test repository with temporary database."""
    db_path = tmp_path / "test.db"
    repo = SQLiteTrackRepository(db_path)
    await repo.initialize()
    yield repo
    await repo.close()


async def test_initialize_creates_tables(repo: SQLiteTrackRepository):
    """Test that initialize creates all required tables."""
    conn = await repo._get_connection()
    cursor = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table'"
    )
    tables = {row[0] for row in await cursor.fetchall()}

    assert "tracks" in tables
    assert "markers" in tables


async def test_repository_satisfies_accessor_contract(repo: SQLiteTrackRepository):
    assert isinstance(repo, RecordAccessor)


async def test_insert_and_get_track(repo: SQLiteTrackRepository):
    """Test inserting and retrieving a track with statistics."""
    track_id = await repo.insert_track(
        name="Morning run",
        description="Along the river",
        category="running",
        start_time=START,
        stop_time=START + timedelta(hours=1),
        total_distance_m=10_500.0,
    )

    assert track_id > 0

    track = await repo.get_track(track_id)
    assert track is not None
    assert track.name == "Morning run"
    assert track.category == "running"
    assert track.statistics.start_time == START
    assert track.statistics.average_time == START + timedelta(minutes=30)
    assert track.statistics.total_distance_m == 10_500.0


async def test_track_without_times_reads_back_unrecorded(repo: SQLiteTrackRepository):
    track_id = await repo.insert_track(name="Planned")

    track = await repo.get_track(track_id)
    assert track is not None
    assert track.statistics.start_time is None
    assert track.statistics.stop_time is None
    assert track.statistics.average_time is None


async def test_insert_and_get_marker(repo: SQLiteTrackRepository):
    """Test marker round trip including position and time."""
    track_id = await repo.insert_track(name="Hike")
    marker_id = await repo.insert_marker(
        track_id,
        HERE,
        name="Summit",
        description="Great view",
        category="viewpoint",
        time=START,
    )

    marker = await repo.get_marker(marker_id)
    assert marker is not None
    assert marker.track_id == track_id
    assert marker.name == "Summit"
    assert marker.position == HERE
    assert marker.time == START


async def test_get_missing_records(repo: SQLiteTrackRepository):
    assert await repo.get_track(999) is None
    assert await repo.get_marker(999) is None


async def test_marker_requires_existing_track(repo: SQLiteTrackRepository):
    """Foreign key keeps markers attached to real tracks."""
    with pytest.raises(StorageError) as exc_info:
        await repo.insert_marker(12345, HERE, name="Orphan")

    assert exc_info.value.code is ErrorCode.STORAGE_WRITE_FAILED
    assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
    assert await repo.get_marker_count() == 0

    # The connection stays usable after a rejected write
    track_id = await repo.insert_track(name="Owner")
    assert await repo.insert_marker(track_id, HERE, name="Attached") > 0


async def test_fetch_matching_tracks_checks_all_text_fields(repo: SQLiteTrackRepository):
    """Test the candidate pre-filter covers name, description and category."""
    by_name = await repo.insert_track(name="Lake loop")
    by_description = await repo.insert_track(name="Run", description="around the LAKE")
    by_category = await repo.insert_track(name="Ride", category="lakeside")
    await repo.insert_track(name="Forest", description="trees", category="hiking")

    tracks = await repo.fetch_matching_tracks(TextPredicate(text="Lake"))

    assert {t.id for t in tracks} == {by_name, by_description, by_category}


async def test_fetch_matching_is_case_insensitive_beyond_ascii(repo: SQLiteTrackRepository):
    """Test the pre-filter is not stricter than the scorer for non-ASCII text."""
    track_id = await repo.insert_track(name="Über den Pass")

    tracks = await repo.fetch_matching_tracks(TextPredicate(text="über"))

    assert [t.id for t in tracks] == [track_id]


async def test_fetch_matching_treats_wildcards_literally(repo: SQLiteTrackRepository):
    await repo.insert_track(name="100% uphill")
    await repo.insert_track(name="1000 uphill")

    tracks = await repo.fetch_matching_tracks(TextPredicate(text="0%"))

    assert [t.name for t in tracks] == ["100% uphill"]


async def test_fetch_matching_markers(repo: SQLiteTrackRepository):
    """Test marker pre-filter uses the marker's own fields."""
    track_id = await repo.insert_track(name="Waterfall trail")
    match_id = await repo.insert_marker(track_id, HERE, name="Falls")
    await repo.insert_marker(track_id, HERE, name="Parking")

    markers = await repo.fetch_matching_markers(TextPredicate(text="fall"))

    assert [m.id for m in markers] == [match_id]


async def test_fetch_with_empty_text_returns_nothing(repo: SQLiteTrackRepository):
    await repo.insert_track(name="Anything")

    assert await repo.fetch_matching_tracks(TextPredicate(text="")) == []


async def test_record_counts(repo: SQLiteTrackRepository):
    """Test track and marker counts."""
    assert await repo.get_track_count() == 0
    assert await repo.get_marker_count() == 0

    track_id = await repo.insert_track(name="One")
    await repo.insert_track(name="Two")
    await repo.insert_marker(track_id, HERE, name="Pin")

    assert await repo.get_track_count() == 2
    assert await repo.get_marker_count() == 1


async def test_concurrent_search_shares_one_connection(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    """Both per-kind fetches of a search reuse a single lazily opened connection."""
    db_path = tmp_path / "shared.db"
    setup = SQLiteTrackRepository(db_path)
    await setup.initialize()
    track_id = await setup.insert_track(name="Lake loop")
    await setup.insert_marker(track_id, HERE, name="Lakeside bench")
    await setup.close()

    opened = []
    real_connect = aiosqlite.connect

    def counting_connect(*args, **kwargs):
        conn = real_connect(*args, **kwargs)
        opened.append(conn)
        return conn

    monkeypatch.setattr(aiosqlite, "connect", counting_connect)

    repo = SQLiteTrackRepository(db_path)
    engine = RelevanceSearchEngine(repo, settings=Settings())
    try:
        results = await engine.search(SearchQuery(text="lake"))
    finally:
        await repo.close()

    assert len(results) == 2
    assert len(opened) == 1
    assert repo._connection is None
