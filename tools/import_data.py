#!/usr/bin/env python3
"""
Data Import Tool - Load a JSON snapshot of tracks and markers into SQLite.

Snapshot format:
    {
      "tracks": [
        {"ref": "t1", "name": "Morning run", "category": "running",
         "start_time": "2024-05-01T08:00:00+00:00", "stop_time": "2024-05-01T09:00:00+00:00"}
      ],
      "markers": [
        {"track": "t1", "name": "Bridge", "latitude": 47.37, "longitude": 8.54,
         "time": "2024-05-01T08:20:00+00:00"}
      ]
    }

Markers refer to tracks by the track's ``ref`` from the same file.

Usage:
    python tools/import_data.py snapshot.json
    python tools/import_data.py snapshot.json --db data/tracksearch.db
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import AwareDatetime, TypeAdapter, ValidationError

from tracksearch.adapters import SQLiteTrackRepository
from tracksearch.config import get_settings
from tracksearch.domains.tracks import GeoPosition, TrackStatistics

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

_optional_time = TypeAdapter(AwareDatetime | None)


async def import_snapshot(snapshot: dict[str, Any], repo: SQLiteTrackRepository) -> dict[str, int]:
    """
    Import tracks, then markers, into the repository.

    Args:
        snapshot: Parsed snapshot with "tracks" and "markers" lists
        repo: Initialized repository

    Returns:
        Stats dict with imported/skipped counts
    """
    stats = {"tracks": 0, "markers": 0, "skipped": 0}
    refs: dict[str, int] = {}

    for item in snapshot.get("tracks", []):
        try:
            statistics = TrackStatistics.model_validate(
                {
                    "start_time": item.get("start_time"),
                    "stop_time": item.get("stop_time"),
                    "total_distance_m": item.get("total_distance_m", 0.0),
                    "total_time_s": item.get("total_time_s", 0.0),
                }
            )
        except ValidationError as e:
            logger.warning("Skipping track %r: %s", item.get("name"), e)
            stats["skipped"] += 1
            continue

        track_id = await repo.insert_track(
            name=item.get("name", ""),
            description=item.get("description", ""),
            category=item.get("category", ""),
            start_time=statistics.start_time,
            stop_time=statistics.stop_time,
            total_distance_m=statistics.total_distance_m,
            total_time_s=statistics.total_time_s,
        )
        if ref := item.get("ref"):
            refs[ref] = track_id
        stats["tracks"] += 1

    for item in snapshot.get("markers", []):
        track_ref = item.get("track")
        if track_ref not in refs:
            logger.warning("Skipping marker %r: unknown track %r", item.get("name"), track_ref)
            stats["skipped"] += 1
            continue

        try:
            position = GeoPosition(latitude=item["latitude"], longitude=item["longitude"])
            time = _optional_time.validate_python(item.get("time"))
        except (KeyError, ValidationError) as e:
            logger.warning("Skipping marker %r: %s", item.get("name"), e)
            stats["skipped"] += 1
            continue

        await repo.insert_marker(
            refs[track_ref],
            position,
            name=item.get("name", ""),
            description=item.get("description", ""),
            category=item.get("category", ""),
            time=time,
        )
        stats["markers"] += 1

    logger.info(
        "Imported %d tracks, %d markers (%d skipped)",
        stats["tracks"],
        stats["markers"],
        stats["skipped"],
    )
    return stats


async def _run(source: Path, db_path: Path) -> dict[str, int]:
    with open(source) as f:
        snapshot = json.load(f)

    repo = SQLiteTrackRepository(db_path)
    try:
        await repo.initialize()
        return await import_snapshot(snapshot, repo)
    finally:
        await repo.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Import a track/marker JSON snapshot")
    parser.add_argument("source", type=Path, help="Snapshot JSON file")
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Database path (default: settings db_path)",
    )

    args = parser.parse_args()

    if not args.source.exists():
        logger.error("Snapshot not found: %s", args.source)
        return 1

    db_path = args.db or get_settings().db_path
    stats = asyncio.run(_run(args.source, db_path))
    return 0 if stats["tracks"] or stats["markers"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
