# src/tripmatch/features/theme.py
"""
Theme feature (destination-level).

Compares the (feedback-adjusted) 9-dim theme vector of the profile against the
destination's theme vector using cosine similarity. Theme scores are all non-negative,
so the similarity stays within 0..1.
"""

from __future__ import annotations

import math
from typing import Sequence

from tripmatch.domain.models import THEMES, CatalogItem
from tripmatch.scoring.composite import ComponentResult, clamp01


def cosine_similarity(a: Sequence[float | None], b: Sequence[float | None]) -> float:
    """Cosine similarity `dot / (|a| |b|)`.

    Returns 0.0 if the lengths differ or either vector has zero magnitude.
    None entries are treated as 0.
    """
    if len(a) != len(b):
        return 0.0

    dot = 0.0
    mag_a = 0.0
    mag_b = 0.0
    for x, y in zip(a, b):
        x = float(x or 0)
        y = float(y or 0)
        dot += x * y
        mag_a += x * x
        mag_b += y * y

    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot / (math.sqrt(mag_a) * math.sqrt(mag_b))


def score_theme(profile_vector: Sequence[float], destination: CatalogItem) -> ComponentResult:
    item_vector = destination.theme_vector()
    score = clamp01(cosine_similarity(profile_vector, item_vector))

    # Name the strongest shared themes so the trace output is readable.
    shared = [t for t, u, d in zip(THEMES, profile_vector, item_vector) if u >= 4 and d >= 4]
    reasons = [f"Shared themes: {', '.join(shared)}"] if shared else []
    return ComponentResult(score=score, details={"item_vector": item_vector}, reasons=reasons)
