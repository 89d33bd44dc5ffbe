# src/tripmatch/feedback/adjuster.py
"""
Feedback adjuster.

Users can like or dislike destinations they were shown before. Before scoring, we nudge
the profile's theme vector towards what they liked and away from what they disliked:

1. Look up the theme vectors of the liked and disliked destinations in the catalog
   (unknown ids are skipped with a warning; ratings can outlive catalog entries).
2. delta = mean(liked vectors) - mean(disliked vectors)   (an empty side counts as zeros)
3. Round each dimension away from zero to a whole step: 0.2 -> 1, -1.5 -> -2, 0 -> 0.
4. Add to the base profile and clamp every theme into [1, 5].

The function is pure: it returns a new profile and never touches the caller's object.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from tripmatch.config.settings import Settings, get_settings
from tripmatch.domain.models import THEMES, CatalogItem, PreferenceProfile, ProfileAdjustment

logger = logging.getLogger(__name__)


def mean_vector(vectors: Sequence[Sequence[float]], dims: int = len(THEMES)) -> list[float]:
    """Element-wise arithmetic mean; an all-zero vector when there is nothing to average."""
    if not vectors:
        return [0.0] * dims
    return [sum(v[i] for v in vectors) / len(vectors) for i in range(dims)]


def round_away_from_zero(value: float) -> int:
    """Ceiling of the magnitude, keeping the sign (0 stays 0)."""
    if value > 0:
        return math.ceil(value)
    if value < 0:
        return -math.ceil(-value)
    return 0


def adjust_profile(
    profile: PreferenceProfile,
    catalog: Sequence[CatalogItem],
    *,
    settings: Settings | None = None,
) -> ProfileAdjustment:
    """Return a feedback-adjusted copy of `profile` plus the per-theme corrections."""
    settings = settings or get_settings()
    lo = int(settings.scoring.theme.min_value)
    hi = int(settings.scoring.theme.max_value)

    # First occurrence wins, matching the content scorer.
    by_id: dict[str, CatalogItem] = {}
    for item in catalog:
        by_id.setdefault(item.id, item)
    liked: list[list[float]] = []
    disliked: list[list[float]] = []
    liked_ids: list[str] = []
    disliked_ids: list[str] = []
    unknown_ids: list[str] = []

    for item_id, rating in profile.destination_ratings.items():
        item = by_id.get(item_id)
        if item is None:
            logger.warning("Rated destination %s not found in catalog; skipping", item_id)
            unknown_ids.append(item_id)
            continue
        if rating == "like":
            liked.append(item.theme_vector())
            liked_ids.append(item_id)
        else:
            disliked.append(item.theme_vector())
            disliked_ids.append(item_id)

    liked_mean = mean_vector(liked)
    disliked_mean = mean_vector(disliked)
    delta = [a - b for a, b in zip(liked_mean, disliked_mean)]
    steps = [round_away_from_zero(d) for d in delta]

    base = profile.theme_vector()
    adjusted = [max(lo, min(hi, int(round(b)) + s)) for b, s in zip(base, steps)]

    if liked or disliked:
        logger.info(
            "Adjusted theme vector from %d liked / %d disliked destinations: %s",
            len(liked),
            len(disliked),
            dict(zip(THEMES, steps)),
        )

    return ProfileAdjustment(
        profile=profile.with_theme_vector(adjusted),
        adjustments=dict(zip(THEMES, steps)),
        liked_ids=liked_ids,
        disliked_ids=disliked_ids,
        unknown_ids=unknown_ids,
    )
