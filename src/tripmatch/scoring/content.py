from __future__ import annotations

# Content scorer: runs every destination-level feature for one (adjusted) profile and
# blends the present sub-scores into a single content score per destination.
#
# Data flow:
# - profile fields are normalized ONCE per request (months -> numbers, labels -> slugs)
# - each feature returns a ComponentResult or None ("inputs missing, do not count me")
# - the blend renormalizes over the weights of the features that were present

import logging
from typing import Sequence

from tripmatch.config.settings import Settings, get_settings
from tripmatch.domain.models import CatalogItem, PreferenceProfile, ScoreRecord
from tripmatch.features.budget import score_budget
from tripmatch.features.climate import midpoint, resolve_months, score_climate
from tripmatch.features.distance import score_distance
from tripmatch.features.duration import normalize_durations, score_duration_match
from tripmatch.features.region import score_region
from tripmatch.features.theme import score_theme
from tripmatch.scoring.composite import ComponentResult, renormalized_blend

logger = logging.getLogger(__name__)


def score_content(
    adjusted_profile: PreferenceProfile,
    catalog: Sequence[CatalogItem],
    *,
    settings: Settings | None = None,
) -> dict[str, ScoreRecord]:
    """Score every catalog item against the profile; keys keep catalog order."""
    settings = settings or get_settings()
    weights = settings.scoring.content_weights.model_dump()

    # ---- Normalize profile inputs once (not per destination) ----
    profile_vector = adjusted_profile.theme_vector()
    months = resolve_months(adjusted_profile.travel_months) if adjusted_profile.temperature_range else []
    desired_mid = midpoint(adjusted_profile.temperature_range)
    user_durations = normalize_durations(adjusted_profile.travel_duration)
    origin = adjusted_profile.origin_location.to_geo_point() if adjusted_profile.origin_location else None

    records: dict[str, ScoreRecord] = {}
    for dest in catalog:
        if dest.id in records:
            # Keep the first occurrence so ranking ties stay in catalog order.
            logger.warning("Duplicate catalog id %s; keeping the first entry", dest.id)
            continue

        components: dict[str, ComponentResult | None] = {
            "theme": score_theme(profile_vector, dest),
            "climate": score_climate(dest, months=months, desired_mid=desired_mid, settings=settings),
            "budget": score_budget(dest, accepted_labels=adjusted_profile.travel_budget, settings=settings),
            "region": score_region(dest, preferred_regions=adjusted_profile.preferred_regions, settings=settings),
            "duration_match": score_duration_match(dest, user_durations=user_durations, settings=settings),
            "distance": score_distance(dest, origin=origin, user_durations=user_durations, settings=settings),
        }
        scores = {name: (c.score if c is not None else None) for name, c in components.items()}

        records[dest.id] = ScoreRecord(
            item_id=dest.id,
            theme_score=scores["theme"],
            climate_score=scores["climate"],
            budget_score=scores["budget"],
            region_score=scores["region"],
            duration_match_score=scores["duration_match"],
            distance_score=scores["distance"],
            content_score=renormalized_blend(scores, weights),
            details={
                name: {"details": c.details, "reasons": c.reasons}
                for name, c in components.items()
                if c is not None and (c.details or c.reasons)
            },
        )
    return records
