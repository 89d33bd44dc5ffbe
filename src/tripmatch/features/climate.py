# src/tripmatch/features/climate.py
"""
Climate feature (destination-level).

Scores how close the destination's monthly average temperatures are to the midpoint
of the user's preferred temperature range, for each month the user wants to travel.

Product rules:
- Each month is scored with a Gaussian kernel centered on the desired midpoint:
  exp(-(delta^2) / (2 * sigma^2)). A perfect match scores 1.0 and the score falls off
  smoothly (sigma = 5 degC by default, configured in YAML).
- Months without temperature data for the destination are skipped.
- If no requested month has data (or the user gave no months / no range), the feature
  is omitted (None) so its weight is redistributed instead of counting as zero.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from tripmatch.config.settings import Settings
from tripmatch.domain.models import CatalogItem
from tripmatch.scoring.composite import ComponentResult, clamp01

logger = logging.getLogger(__name__)

MONTHS: dict[str, int] = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}


def month_index(name: str | None) -> int | None:
    """Return the 1-based month number for a full month name (case-insensitive)."""
    if not name:
        return None
    return MONTHS.get(name.strip().lower())


def midpoint(temperature_range: Sequence[float] | None) -> float | None:
    """Return the midpoint of a (min, max) pair, or None if the range is unusable."""
    if temperature_range is None or len(temperature_range) != 2:
        return None
    low, high = temperature_range
    return (float(low) + float(high)) / 2


def gaussian_climate_score(avg_temp: float, desired_mid: float, sigma: float = 5.0) -> float:
    """Gaussian kernel on the temperature difference, clamped to 0..1."""
    delta = float(avg_temp) - float(desired_mid)
    return clamp01(math.exp(-(delta * delta) / (2 * sigma * sigma)))


def resolve_months(month_names: Sequence[str]) -> list[int]:
    """Map month names to numbers, skipping (and logging) names we do not recognize."""
    months: list[int] = []
    for name in month_names:
        idx = month_index(name)
        if idx is None:
            logger.warning("Ignoring unknown travel month: %r", name)
            continue
        months.append(idx)
    return months


def score_climate(
    destination: CatalogItem,
    *,
    months: Sequence[int],
    desired_mid: float | None,
    settings: Settings,
) -> ComponentResult | None:
    # Both inputs are required; missing either one means "no opinion", not "bad climate".
    if not months or desired_mid is None:
        return None

    sigma = float(settings.scoring.climate.sigma_c)
    per_month: list[tuple[int, float]] = []
    for m in months:
        avg = destination.average_temperature(m)
        if avg is None:
            continue
        per_month.append((m, gaussian_climate_score(avg, desired_mid, sigma)))

    if not per_month:
        return None

    score = sum(s for _, s in per_month) / len(per_month)
    details = {"desired_mid_c": desired_mid, "month_scores": dict(per_month)}
    reasons = [f"Climate fit {score:.0%} across {len(per_month)} month(s)"]
    return ComponentResult(score=score, details=details, reasons=reasons)
