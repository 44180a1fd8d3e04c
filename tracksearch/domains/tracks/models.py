"""
Track Models - Data types for recorded tracks and markers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import AwareDatetime, BaseModel, Field, model_validator


class GeoPosition(BaseModel):
    """WGS84 latitude/longitude pair in degrees."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    model_config = {"frozen": True}


class TrackStatistics(BaseModel):
    """Aggregate statistics of a track. Times are None until recorded."""

    start_time: AwareDatetime | None = None
    stop_time: AwareDatetime | None = None
    total_distance_m: float = Field(default=0.0, ge=0)
    total_time_s: float = Field(default=0.0, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_order(self) -> TrackStatistics:
        if self.start_time and self.stop_time and self.stop_time < self.start_time:
            raise ValueError("stop_time must not precede start_time")
        return self

    @property
    def average_time(self) -> datetime | None:
        """Midpoint of start and stop, or None unless both are recorded."""
        if self.start_time is None or self.stop_time is None:
            return None
        return self.start_time + (self.stop_time - self.start_time) / 2


class Track(BaseModel):
    """A recorded activity."""

    kind: Literal["track"] = "track"
    id: int
    name: str = ""
    description: str = ""
    category: str = ""
    statistics: TrackStatistics = Field(default_factory=TrackStatistics)

    model_config = {"frozen": True}


class Marker(BaseModel):
    """A point annotation on a track."""

    kind: Literal["marker"] = "marker"
    id: int
    track_id: int | None = None  # None when the owning track is unknown
    name: str = ""
    description: str = ""
    category: str = ""
    position: GeoPosition
    time: AwareDatetime | None = None

    model_config = {"frozen": True}
