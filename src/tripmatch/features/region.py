"""Region feature: exact (case-insensitive) region match against the user's preferred regions."""

from __future__ import annotations

from typing import Sequence

from tripmatch.config.settings import Settings
from tripmatch.domain.models import CatalogItem
from tripmatch.scoring.composite import ComponentResult


def score_region(
    destination: CatalogItem, *, preferred_regions: Sequence[str], settings: Settings
) -> ComponentResult | None:
    if not preferred_regions or not destination.region:
        return None

    cfg = settings.scoring.region
    wanted = {r.strip().lower() for r in preferred_regions if r}
    if destination.region.strip().lower() in wanted:
        return ComponentResult(score=float(cfg.match), reasons=[f"In preferred region {destination.region}"])
    return ComponentResult(score=float(cfg.mismatch), reasons=[f"Outside preferred regions ({destination.region})"])
