from __future__ import annotations

# Hybrid ranker: blend content + collaborative scores, sort, cut to top-N, map to confidence.
#
# Blend weights depend on whether the user has rated anything:
# - no ratings  -> content only (collaborative signal would be empty anyway)
# - any ratings -> 0.7 content + 0.3 collaborative (values in YAML)

import logging
from typing import Callable, Mapping

from tripmatch.config.settings import HybridWeights, Settings, get_settings
from tripmatch.domain.models import Recommendation, ScoreRecord
from tripmatch.scoring.confidence import score_to_confidence

logger = logging.getLogger(__name__)

# Called with (rank starting at 1, final score record, confidence) for each returned item.
TraceHook = Callable[[int, ScoreRecord, int], None]


def hybrid_weights(has_ratings: bool, settings: Settings) -> HybridWeights:
    hybrid = settings.scoring.hybrid
    return hybrid.with_ratings if has_ratings else hybrid.without_ratings


def blend(
    content_scores: Mapping[str, ScoreRecord],
    collab_scores: Mapping[str, float],
    has_ratings: bool,
    *,
    settings: Settings,
) -> list[ScoreRecord]:
    """Return new score records with collab/hybrid scores filled in (catalog order)."""
    weights = hybrid_weights(has_ratings, settings)
    out: list[ScoreRecord] = []
    for item_id, record in content_scores.items():
        collab = float(collab_scores.get(item_id, 0.0))
        hybrid = weights.content * record.content_score + weights.collaborative * collab
        out.append(record.model_copy(update={"collab_score": collab, "hybrid_score": hybrid}))
    return out


def rank_records(records: list[ScoreRecord], top_n: int) -> list[ScoreRecord]:
    # `sorted` is stable even with reverse=True, so ties keep catalog order.
    return sorted(records, key=lambda r: r.hybrid_score, reverse=True)[: max(0, int(top_n))]


def rank(
    content_scores: Mapping[str, ScoreRecord],
    collab_scores: Mapping[str, float],
    has_ratings: bool,
    top_n: int = 3,
    *,
    settings: Settings | None = None,
    trace: TraceHook | None = None,
) -> list[Recommendation]:
    """Blend, rank and map to confidence; returns at most `top_n` recommendations."""
    settings = settings or get_settings()
    if not content_scores:
        return []

    ranked = rank_records(blend(content_scores, collab_scores, has_ratings, settings=settings), top_n)
    bands = settings.scoring.confidence_bands

    results: list[Recommendation] = []
    for position, record in enumerate(ranked, start=1):
        confidence = score_to_confidence(record.hybrid_score, bands=bands)
        if trace is not None:
            trace(position, record, confidence)
        results.append(Recommendation(item_id=record.item_id, confidence=confidence))
    return results


def log_trace(position: int, record: ScoreRecord, confidence: int) -> None:
    """Trace hook that writes every sub-score of a ranked item to the debug log."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("Rank %d: %s (confidence %d%%)", position, record.item_id, confidence)
    for line in record.describe():
        logger.debug("  %s", line)
