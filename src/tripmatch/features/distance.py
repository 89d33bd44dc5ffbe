# src/tripmatch/features/distance.py
"""
Distance feature (destination-level).

This module converts the great-circle distance from the user's origin into a 0..1 score:
- Base score decays smoothly with distance: 1 / (1 + (km / scale)^2).
  With the default scale (2000 km) a destination 2000 km away scores 0.5.
- If the user said how long they travel, the *shortest* requested duration sets a
  "reasonable distance" threshold (a day trip should not cross an ocean). Beyond that
  threshold the base score is multiplied by threshold / km, floored at 0.1.

Both tables (duration -> days, days -> threshold km) live in YAML.
"""

from __future__ import annotations

from tripmatch.config.settings import Settings
from tripmatch.core.geo import GeoPoint, haversine_km
from tripmatch.domain.models import CatalogItem
from tripmatch.scoring.composite import ComponentResult, clamp01


def duration_to_days(label: str, settings: Settings) -> int | None:
    """Map a normalized duration label to its approximate day count; None if unknown."""
    return settings.scoring.distance.duration_days.get(label)


def threshold_km_for(user_durations: list[str], settings: Settings) -> float | None:
    """Return the distance threshold implied by the shortest mappable duration.

    Returns None when the user gave no durations or none of them map to a day count.
    """
    cfg = settings.scoring.distance
    days = [d for d in (duration_to_days(x, settings) for x in user_durations) if d is not None]
    if not days:
        return None
    shortest = min(days)
    threshold = cfg.threshold_km_by_days.get(shortest)
    if threshold is None:
        threshold = cfg.threshold_km_by_days.get(cfg.fallback_days)
    return float(threshold) if threshold is not None else None


def distance_penalty(km: float, threshold_km: float | None, *, floor: float = 0.1) -> float:
    """Multiplier applied when a destination lies beyond the duration threshold.

    1.0 up to (and at) the threshold, then threshold / km, never below `floor`.
    """
    if threshold_km is None or threshold_km <= 0 or km <= threshold_km:
        return 1.0
    return max(floor, threshold_km / km)


def score_distance(
    destination: CatalogItem,
    *,
    origin: GeoPoint | None,
    user_durations: list[str],
    settings: Settings,
) -> ComponentResult | None:
    coords = destination.coordinates()
    if origin is None or coords is None:
        return None

    cfg = settings.scoring.distance
    km = haversine_km(origin, coords)
    base = 1.0 / (1.0 + (km / float(cfg.scale_km)) ** 2)

    threshold = threshold_km_for(user_durations, settings) if user_durations else None
    multiplier = distance_penalty(km, threshold, floor=float(cfg.min_penalty_multiplier))
    score = clamp01(base * multiplier)

    reasons = [f"{km:,.0f} km from origin"]
    if multiplier < 1.0:
        reasons.append(f"Beyond {threshold:,.0f} km for the shortest trip length")
    details = {
        "distance_km": km,
        "base_score": base,
        "threshold_km": threshold,
        "penalty_multiplier": multiplier,
    }
    return ComponentResult(score=score, details=details, reasons=reasons)
