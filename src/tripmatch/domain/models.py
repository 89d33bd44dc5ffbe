"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- caller inputs (`PreferenceProfile`)
- catalog entities (`CatalogItem`)
- per-request scoring state (`ScoreRecord`)
- ranked output (`Recommendation`, `RecommendationResult`)

Keeping these models in one place helps:
- explicit optional fields with documented defaults (absent theme score => 0),
- consistent JSON output across CLI and library callers,
- accepting both snake_case and the camelCase keys the web client sends.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tripmatch.core.geo import GeoPoint

logger = logging.getLogger(__name__)

# Order matters: every theme vector in the system uses this dimension order.
THEMES: tuple[str, ...] = (
    "culture",
    "adventure",
    "nature",
    "beaches",
    "nightlife",
    "cuisine",
    "wellness",
    "urban",
    "seclusion",
)

Rating = Literal["like", "dislike"]


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(_Model):
    """A named origin point; either coordinate may be missing in loosely-shaped input."""

    name: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lon: float | None = Field(default=None, ge=-180, le=180)

    def to_geo_point(self) -> GeoPoint | None:
        if self.lat is None or self.lon is None:
            return None
        return GeoPoint(lat=self.lat, lon=self.lon)


class PreferenceProfile(_Model):
    """A caller's travel preferences for one scoring request."""

    culture: int | None = Field(default=None, ge=0, le=5)
    adventure: int | None = Field(default=None, ge=0, le=5)
    nature: int | None = Field(default=None, ge=0, le=5)
    beaches: int | None = Field(default=None, ge=0, le=5)
    nightlife: int | None = Field(default=None, ge=0, le=5)
    cuisine: int | None = Field(default=None, ge=0, le=5)
    wellness: int | None = Field(default=None, ge=0, le=5)
    urban: int | None = Field(default=None, ge=0, le=5)
    seclusion: int | None = Field(default=None, ge=0, le=5)

    temperature_range: tuple[float, float] | None = None
    travel_months: list[str] = Field(default_factory=list)
    travel_duration: list[str] = Field(default_factory=list)
    preferred_regions: list[str] = Field(default_factory=list)
    origin_location: Location | None = None
    travel_budget: list[str] = Field(default_factory=list)
    destination_ratings: dict[str, Rating] = Field(default_factory=dict)

    @field_validator("temperature_range", mode="before")
    @classmethod
    def _drop_malformed_range(cls, value: Any) -> Any:
        if value is None:
            return None
        ok = (
            isinstance(value, (list, tuple))
            and len(value) == 2
            and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
        )
        if not ok:
            logger.warning("Ignoring malformed temperature range: %r", value)
            return None
        return value

    @field_validator("destination_ratings", mode="before")
    @classmethod
    def _normalize_ratings(cls, value: Any) -> Any:
        if not value:
            return {}
        if not isinstance(value, dict):
            logger.warning("Ignoring malformed destination ratings: %r", value)
            return {}
        out: dict[str, str] = {}
        for item_id, rating in value.items():
            normalized = str(rating).strip().lower() if rating is not None else ""
            if normalized not in ("like", "dislike"):
                logger.warning("Ignoring rating %r for destination %s", rating, item_id)
                continue
            out[str(item_id)] = normalized
        return out

    @field_validator("travel_months", "travel_duration", "preferred_regions", "travel_budget", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def theme_vector(self) -> list[float]:
        """Return the 9-dim theme vector (absent themes => 0)."""
        return [float(getattr(self, t) or 0) for t in THEMES]

    def with_theme_vector(self, values: list[int]) -> "PreferenceProfile":
        """Return a copy of this profile with its theme scores replaced."""
        return self.model_copy(update=dict(zip(THEMES, values)))

    @property
    def has_ratings(self) -> bool:
        return bool(self.destination_ratings)

    @property
    def liked_ids(self) -> list[str]:
        return [i for i, r in self.destination_ratings.items() if r == "like"]

    @property
    def disliked_ids(self) -> list[str]:
        return [i for i, r in self.destination_ratings.items() if r == "dislike"]


class MonthlyTemperature(_Model):
    avg: float | None = None
    min: float | None = None
    max: float | None = None


class CatalogItem(_Model):
    """A destination candidate to score and rank."""

    id: str
    city: str | None = None
    country: str | None = None
    short_description: str | None = None

    culture: float | None = None
    adventure: float | None = None
    nature: float | None = None
    beaches: float | None = None
    nightlife: float | None = None
    cuisine: float | None = None
    wellness: float | None = None
    urban: float | None = None
    seclusion: float | None = None

    # Keyed by month number 1..12 (JSON string keys are coerced).
    avg_temp_monthly: dict[int, MonthlyTemperature] = Field(default_factory=dict)
    budget_level: str | None = None
    region: str | None = None
    ideal_durations: list[str] = Field(default_factory=list)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("avg_temp_monthly", mode="before")
    @classmethod
    def _none_as_empty_mapping(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("ideal_durations", mode="before")
    @classmethod
    def _none_as_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    def theme_vector(self) -> list[float]:
        """Return the 9-dim theme vector (absent themes => 0)."""
        return [float(getattr(self, t) or 0) for t in THEMES]

    def average_temperature(self, month: int) -> float | None:
        entry = self.avg_temp_monthly.get(month)
        return entry.avg if entry is not None else None

    def coordinates(self) -> GeoPoint | None:
        if self.latitude is None or self.longitude is None:
            return None
        return GeoPoint(lat=self.latitude, lon=self.longitude)


SUB_SCORE_FIELDS: tuple[str, ...] = (
    "theme_score",
    "climate_score",
    "budget_score",
    "region_score",
    "duration_match_score",
    "distance_score",
)


class ScoreRecord(BaseModel):
    """Per-item scores for one request.

    Sub-scores are None when their inputs were unavailable (omitted, not zero).
    `details` carries per-factor diagnostics (e.g. distance km, penalty multiplier).
    """

    item_id: str
    theme_score: float | None = None
    climate_score: float | None = None
    budget_score: float | None = None
    region_score: float | None = None
    duration_match_score: float | None = None
    distance_score: float | None = None
    content_score: float = 0.0
    collab_score: float = 0.0
    hybrid_score: float = 0.0
    details: dict[str, Any] = Field(default_factory=dict)

    def sub_scores(self) -> dict[str, float | None]:
        return {name: getattr(self, name) for name in SUB_SCORE_FIELDS}

    def describe(self) -> list[str]:
        """Render one trace line per score (diagnostic hook for debug logging)."""

        def fmt(v: float | None) -> str:
            return "N/A" if v is None else f"{v:.3f}"

        lines = [f"{name:<22}{fmt(value)}" for name, value in self.sub_scores().items()]
        lines.append(f"{'content_score':<22}{fmt(self.content_score)}")
        lines.append(f"{'collab_score':<22}{fmt(self.collab_score)}")
        lines.append(f"{'hybrid_score':<22}{fmt(self.hybrid_score)}")
        return lines


class Recommendation(BaseModel):
    """One ranked output item."""

    item_id: str
    confidence: int = Field(..., ge=0, le=100)


class ProfileAdjustment(BaseModel):
    """Feedback-adjusted profile plus the per-theme integer corrections applied."""

    profile: PreferenceProfile
    adjustments: dict[str, int]
    liked_ids: list[str] = Field(default_factory=list)
    disliked_ids: list[str] = Field(default_factory=list)
    unknown_ids: list[str] = Field(default_factory=list)


class RecommendationResult(BaseModel):
    """Top-N recommendations plus the profile adjustment and run metadata."""

    generated_at: datetime
    results: list[Recommendation]
    adjustment: ProfileAdjustment | None = None
    meta: dict[str, Any] = Field(default_factory=dict)
