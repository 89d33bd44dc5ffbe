# src/tripmatch/features/duration.py
"""
Duration match feature (destination-level).

Labels come from a UI ("Day trip", "One week", ...) and from the catalog, which do not
always agree on case or spacing, so both sides are normalized to `day-trip` style first.

Score table (values configured in YAML):
- user and destination both have labels: overlap -> 1.0, no overlap -> 0.5
- only the user has labels (destination has no data): 0.8
- only the destination has labels (user did not say): 0.7
- neither: omitted
"""

from __future__ import annotations

from typing import Iterable

from tripmatch.config.settings import Settings
from tripmatch.domain.models import CatalogItem
from tripmatch.scoring.composite import ComponentResult


def normalize_duration(label: str) -> str:
    """Lower-case a duration label and turn spaces into hyphens (`One week` -> `one-week`)."""
    return "-".join(label.strip().lower().split())


def normalize_durations(labels: Iterable[str]) -> list[str]:
    return [normalize_duration(x) for x in labels if x and x.strip()]


def score_duration_match(
    destination: CatalogItem, *, user_durations: list[str], settings: Settings
) -> ComponentResult | None:
    cfg = settings.scoring.duration_match
    item_durations = normalize_durations(destination.ideal_durations)

    if user_durations and item_durations:
        overlap = sorted(set(user_durations) & set(item_durations))
        if overlap:
            return ComponentResult(
                score=float(cfg.overlap),
                details={"overlap": overlap},
                reasons=[f"Ideal for {', '.join(overlap)}"],
            )
        return ComponentResult(score=float(cfg.no_overlap), details={"overlap": []})

    if user_durations:
        return ComponentResult(score=float(cfg.user_only), reasons=["No ideal-duration data"])

    if item_durations:
        return ComponentResult(score=float(cfg.item_only))

    return None
