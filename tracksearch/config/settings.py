"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables (prefix ``TRACKSEARCH_``) and .env files.
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from itertools import combinations
from pathlib import Path

from pydantic import AwareDatetime, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OLDEST_ALLOWED_TIME = datetime(2010, 1, 1, tzinfo=timezone.utc)


def min_text_score_gap(weights: tuple[float, ...]) -> float:
    """Smallest positive difference between any two field-match combinations."""
    sums = sorted(
        {sum(combo) for size in range(len(weights) + 1) for combo in combinations(weights, size)}
    )
    return min(b - a for a, b in zip(sums, sums[1:]))


class Settings(BaseSettings):
    """Application settings."""

    # Paths
    data_dir: Path = Path("data")
    db_path: Path = Path("data/tracksearch.db")

    # Logging
    log_level: str = "INFO"

    # Text field weights
    title_weight: float = Field(default=400.0, gt=0)
    description_weight: float = Field(default=200.0, gt=0)
    category_weight: float = Field(default=100.0, gt=0)

    # Distance boost: max / (1 + metres / scale)
    distance_max_boost: float = Field(default=10.0, ge=0)
    distance_scale_m: float = Field(default=10_000.0, gt=0)

    # Recency boost: max / (1 + seconds / scale)
    recency_max_boost: float = Field(default=10.0, ge=0)
    recency_scale_s: float = Field(default=3_600.0, gt=0)
    oldest_allowed_time: AwareDatetime = OLDEST_ALLOWED_TIME

    # Current-track context
    current_track_demotion: float = Field(default=25.0, ge=0)
    current_track_marker_promotion: float = Field(default=25.0, ge=0)

    # Search
    search_default_limit: int = Field(default=20, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="TRACKSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_score_dominance(self) -> Settings:
        if self.title_weight <= self.description_weight + self.category_weight:
            raise ValueError("title_weight must exceed description_weight + category_weight")
        if self.description_weight <= self.category_weight:
            raise ValueError("description_weight must exceed category_weight")

        boost_spread = self.distance_max_boost + self.recency_max_boost
        for name in ("current_track_demotion", "current_track_marker_promotion"):
            if getattr(self, name) <= boost_spread:
                raise ValueError(
                    f"{name} must exceed distance_max_boost + recency_max_boost ({boost_spread})"
                )

        gap = min_text_score_gap(
            (self.title_weight, self.description_weight, self.category_weight)
        )
        worst_swing = (
            boost_spread + self.current_track_demotion + self.current_track_marker_promotion
        )
        if worst_swing >= gap:
            raise ValueError(
                f"boosts and context adjustments ({worst_swing}) must stay below "
                f"the smallest text score gap ({gap})"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
