"""
Hybrid score -> confidence mapping.

End users see an integer 0..100 rather than a raw 0..1 score. The mapping is a fixed
piecewise-linear curve (bands configured in YAML) so that a "good" score lands in a
recognisable range:

    [0.00, 0.40) -> [0, 49]
    [0.40, 0.60) -> [50, 69]
    [0.60, 0.80) -> [70, 89]
    [0.80, 1.00] -> [90, 100]
"""

from __future__ import annotations

import math
from typing import Sequence

from tripmatch.config.settings import ConfidenceBand, Settings, get_settings
from tripmatch.scoring.composite import clamp01


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def score_to_confidence(
    score: float | None,
    *,
    bands: Sequence[ConfidenceBand] | None = None,
    settings: Settings | None = None,
) -> int:
    """Map a hybrid score to an integer confidence (monotonic, 0 -> 0, 1 -> 100)."""
    if score is None or math.isnan(score):
        return 0
    if bands is None:
        bands = (settings or get_settings()).scoring.confidence_bands

    s = clamp01(score)
    # Bands are sorted by lower bound; pick the last one whose lower bound we reached.
    band = bands[0]
    for candidate in bands:
        if s >= candidate.lower:
            band = candidate

    width = band.upper - band.lower
    fraction = (s - band.lower) / width if width > 0 else 1.0
    value = band.low + (band.high - band.low) * clamp01(fraction)
    return max(0, min(100, _round_half_up(value)))
