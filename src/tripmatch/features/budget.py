# src/tripmatch/features/budget.py
"""
Budget feature (destination-level).

Budget labels are ordinal (budget < mid-range < luxury), so a miss by one level is
better than a miss by two:
- destination level accepted by the user -> 1.0
- otherwise 1 - step_penalty * (distance to the closest accepted level), floored at 0
"""

from __future__ import annotations

from typing import Sequence

from tripmatch.config.settings import Settings
from tripmatch.domain.models import CatalogItem
from tripmatch.scoring.composite import ComponentResult


def budget_level(label: str | None, levels: dict[str, int]) -> int | None:
    """Map a budget label to its ordinal level (case-insensitive); None if unknown."""
    if not label:
        return None
    return levels.get(label.strip().lower())


def score_budget(
    destination: CatalogItem, *, accepted_labels: Sequence[str], settings: Settings
) -> ComponentResult | None:
    cfg = settings.scoring.budget
    levels = {k.lower(): int(v) for k, v in cfg.levels.items()}

    accepted = sorted({lvl for lvl in (budget_level(b, levels) for b in accepted_labels) if lvl is not None})
    item_level = budget_level(destination.budget_level, levels)
    # Unmappable labels on either side mean we cannot judge affordability.
    if not accepted or item_level is None:
        return None

    if item_level in accepted:
        return ComponentResult(
            score=1.0,
            details={"item_level": item_level, "accepted_levels": accepted},
            reasons=[f"Budget match ({destination.budget_level})"],
        )

    distance = min(abs(a - item_level) for a in accepted)
    score = max(0.0, 1.0 - float(cfg.step_penalty) * distance)
    return ComponentResult(
        score=score,
        details={"item_level": item_level, "accepted_levels": accepted, "level_distance": distance},
        reasons=[f"Budget off by {distance} level(s)"],
    )
