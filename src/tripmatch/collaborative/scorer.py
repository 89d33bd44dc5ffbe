# src/tripmatch/collaborative/scorer.py
"""
Collaborative scorer (item-item).

For every destination the user has NOT rated yet, we look at the destinations they
liked and ask the similarity matrix "how similar is this candidate to each liked item?".
The candidate's score is the mean of the positive similarities found.

Notes:
- Lookups go from the liked item's neighbour list to the candidate only (one direction).
- Likes count as an implicit rating of 1, so this is an unweighted average similarity,
  not a rating-weighted CF prediction.
- Missing data never raises: no similarity matrix or no likes -> empty score map.
"""

from __future__ import annotations

import logging
from typing import Sequence

from tripmatch.collaborative.similarity import SimilarityCache, SimilarityMatrix
from tripmatch.domain.models import CatalogItem, PreferenceProfile

logger = logging.getLogger(__name__)


def _similarity(matrix: SimilarityMatrix, liked_id: str, candidate_id: str) -> float:
    for neighbor in matrix.get(liked_id, ()):
        if neighbor.neighbor_id == candidate_id:
            return neighbor.weight
    return 0.0


def score_collaborative_with_matrix(
    profile: PreferenceProfile,
    catalog: Sequence[CatalogItem],
    matrix: SimilarityMatrix,
) -> dict[str, float]:
    """Same as `score_collaborative`, against an explicit matrix snapshot."""
    if not matrix:
        logger.info("Item similarity data is empty; skipping collaborative scoring")
        return {}

    liked_ids = profile.liked_ids
    if not liked_ids:
        return {}

    rated = set(profile.destination_ratings)
    scores: dict[str, float] = {}
    for dest in catalog:
        if dest.id in rated or dest.id in scores:
            continue
        found = [s for s in (_similarity(matrix, liked, dest.id) for liked in liked_ids) if s > 0]
        if not found:
            continue
        score = sum(found) / len(found)
        if score > 0:
            scores[dest.id] = score

    logger.debug("Collaborative scores for %d destinations from %d likes", len(scores), len(liked_ids))
    return scores


def score_collaborative(
    profile: PreferenceProfile,
    catalog: Sequence[CatalogItem],
    *,
    cache: SimilarityCache,
) -> dict[str, float]:
    """Return `{item_id: collaborative score}` for unrated items with a positive score."""
    if not profile.liked_ids:
        # Skip the (possibly remote) fetch entirely when it cannot matter.
        return {}
    return score_collaborative_with_matrix(profile, catalog, cache.get())
