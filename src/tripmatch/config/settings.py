# src/tripmatch/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/tripmatch/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `TRIPMATCH_CONFIG_PATH`
- a small whitelist of environment variables (e.g., `TRIPMATCH_SIMILARITY_URL`)

Design rule:
- Scoring constants (weights, kernels, thresholds, confidence bands) live in YAML,
  not hard-coded in the feature modules.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from tripmatch.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `tripmatch.config`."""
    text = resources.files("tripmatch.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "TripMatch"
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/tripmatch"


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/destinations.json"


class RestSimilaritySettings(BaseModel):
    base_url: str | None = None
    table: str = "item_similarity"
    api_key: str | None = None
    timeout_seconds: float = 15


class SimilaritySettings(BaseModel):
    source: Literal["none", "file", "rest"] = "none"
    path: str = "data/similarity/item_similarity.json"
    rest: RestSimilaritySettings = Field(default_factory=RestSimilaritySettings)


class ContentWeights(BaseModel):
    theme: float = Field(0.35, ge=0)
    climate: float = Field(0.20, ge=0)
    budget: float = Field(0.10, ge=0)
    region: float = Field(0.20, ge=0)
    duration_match: float = Field(0.10, ge=0)
    distance: float = Field(0.05, ge=0)


class ThemeSettings(BaseModel):
    min_value: int = 1
    max_value: int = 5

    @model_validator(mode="after")
    def _validate_bounds(self) -> "ThemeSettings":
        if self.max_value < self.min_value:
            raise ValueError("scoring.theme.max_value must be >= min_value")
        return self


class ClimateSettings(BaseModel):
    sigma_c: float = Field(5, gt=0)


class BudgetSettings(BaseModel):
    levels: dict[str, int] = Field(
        default_factory=lambda: {"budget": 1, "mid-range": 2, "luxury": 3}
    )
    step_penalty: float = Field(0.5, ge=0)


class RegionSettings(BaseModel):
    match: float = Field(1.0, ge=0, le=1)
    mismatch: float = Field(0.3, ge=0, le=1)


class DurationMatchSettings(BaseModel):
    overlap: float = Field(1.0, ge=0, le=1)
    no_overlap: float = Field(0.5, ge=0, le=1)
    user_only: float = Field(0.8, ge=0, le=1)
    item_only: float = Field(0.7, ge=0, le=1)


class DistanceSettings(BaseModel):
    scale_km: float = Field(2000, gt=0)
    min_penalty_multiplier: float = Field(0.1, ge=0, le=1)
    duration_days: dict[str, int] = Field(
        default_factory=lambda: {
            "day-trip": 1,
            "weekend": 2,
            "short-trip": 4,
            "one-week": 7,
            "long-trip": 10,
        }
    )
    threshold_km_by_days: dict[int, float] = Field(
        default_factory=lambda: {1: 500, 2: 1500, 4: 3000, 7: 6000, 10: 15000}
    )
    fallback_days: int = 10


class HybridWeights(BaseModel):
    content: float = Field(..., ge=0)
    collaborative: float = Field(..., ge=0)


class HybridSettings(BaseModel):
    without_ratings: HybridWeights = Field(
        default_factory=lambda: HybridWeights(content=1.0, collaborative=0.0)
    )
    with_ratings: HybridWeights = Field(
        default_factory=lambda: HybridWeights(content=0.7, collaborative=0.3)
    )


class ConfidenceBand(BaseModel):
    lower: float = Field(..., ge=0, le=1)
    upper: float = Field(..., ge=0, le=1)
    low: int = Field(..., ge=0, le=100)
    high: int = Field(..., ge=0, le=100)


def _default_confidence_bands() -> list[ConfidenceBand]:
    return [
        ConfidenceBand(lower=0.0, upper=0.4, low=0, high=49),
        ConfidenceBand(lower=0.4, upper=0.6, low=50, high=69),
        ConfidenceBand(lower=0.6, upper=0.8, low=70, high=89),
        ConfidenceBand(lower=0.8, upper=1.0, low=90, high=100),
    ]


class ScoringSettings(BaseModel):
    top_n_default: int = Field(3, ge=1)
    content_weights: ContentWeights = Field(default_factory=ContentWeights)
    theme: ThemeSettings = Field(default_factory=ThemeSettings)
    climate: ClimateSettings = Field(default_factory=ClimateSettings)
    budget: BudgetSettings = Field(default_factory=BudgetSettings)
    region: RegionSettings = Field(default_factory=RegionSettings)
    duration_match: DurationMatchSettings = Field(default_factory=DurationMatchSettings)
    distance: DistanceSettings = Field(default_factory=DistanceSettings)
    hybrid: HybridSettings = Field(default_factory=HybridSettings)
    confidence_bands: list[ConfidenceBand] = Field(default_factory=_default_confidence_bands)

    @model_validator(mode="after")
    def _validate_bands(self) -> "ScoringSettings":
        if not self.confidence_bands:
            raise ValueError("scoring.confidence_bands must not be empty")
        ordered = sorted(self.confidence_bands, key=lambda b: b.lower)
        if ordered[0].lower > 0 or ordered[-1].upper < 1:
            raise ValueError("scoring.confidence_bands must cover 0..1")
        self.confidence_bands = ordered
        return self


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    similarity: SimilaritySettings = Field(default_factory=SimilaritySettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small to avoid exposing unsafe overrides.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("TRIPMATCH_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    cache_dir = os.getenv("TRIPMATCH_CACHE_DIR")
    if cache_dir:
        data.setdefault("cache", {})["dir"] = cache_dir

    catalog_path = os.getenv("TRIPMATCH_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    sim_source = os.getenv("TRIPMATCH_SIMILARITY_SOURCE")
    if sim_source:
        data.setdefault("similarity", {})["source"] = sim_source.strip().lower()

    sim_url = os.getenv("TRIPMATCH_SIMILARITY_URL")
    sim_key = os.getenv("TRIPMATCH_SIMILARITY_KEY")
    if sim_url:
        data.setdefault("similarity", {}).setdefault("rest", {})["base_url"] = sim_url
    if sim_key:
        data.setdefault("similarity", {}).setdefault("rest", {})["api_key"] = sim_key

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("TRIPMATCH_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
