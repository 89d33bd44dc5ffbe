"""
Shared scoring utilities.

This module contains small, reusable helpers used across feature scorers:
- `clamp01`: keep values within 0..1 for stable output
- `ComponentResult`: a feature score plus explainability payload
- `renormalized_blend`: weighted mean over only the components that were present
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping


def clamp01(x: float) -> float:
    """Clamp a number into the [0.0, 1.0] range."""
    return max(0.0, min(1.0, float(x)))


@dataclass(frozen=True)
class ComponentResult:
    """A normalized feature score plus explainability payload."""

    score: float
    details: dict[str, Any] = field(default_factory=dict)
    reasons: list[str] = field(default_factory=list)


def renormalized_blend(scores: Mapping[str, float | None], weights: Mapping[str, float]) -> float:
    """Weighted mean of the present scores, divided by the weights actually used.

    Missing (None) or NaN scores are skipped so their weight is redistributed across
    the remaining components. Returns 0.0 when nothing was present.
    """
    weighted_sum = 0.0
    weight_sum = 0.0
    for name, weight in weights.items():
        score = scores.get(name)
        if score is None or math.isnan(score):
            continue
        weighted_sum += float(weight) * float(score)
        weight_sum += float(weight)
    if weight_sum <= 0:
        return 0.0
    return weighted_sum / weight_sum
