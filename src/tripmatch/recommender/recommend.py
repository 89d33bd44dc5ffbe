from __future__ import annotations

# This module is the "orchestrator" for the recommendation pipeline.
# It wires together:
# - domain input (PreferenceProfile + catalog)
# - feedback adjustment (likes/dislikes -> adjusted theme vector)
# - content scoring (theme, climate, budget, region, duration, distance)
# - collaborative scoring (item-item similarity via the shared SimilarityCache)
# - hybrid ranking + confidence mapping (RecommendationResult)
#
# Design goal:
# - Keep each layer focused (features do math; this file does orchestration).
# - Fail open when data is missing (empty catalog / no similarity -> still a valid result).

import logging
import time
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from tripmatch.collaborative.scorer import score_collaborative
from tripmatch.collaborative.similarity import SimilarityCache
from tripmatch.config.overrides import apply_settings_overrides
from tripmatch.config.settings import Settings, get_settings
from tripmatch.domain.models import CatalogItem, PreferenceProfile, RecommendationResult
from tripmatch.feedback.adjuster import adjust_profile
from tripmatch.recommender.rank import TraceHook, hybrid_weights, log_trace, rank
from tripmatch.scoring.content import score_content

logger = logging.getLogger(__name__)


def _empty_result(code: str, message: str, meta: dict[str, Any] | None = None) -> RecommendationResult:
    logger.warning(message)
    return RecommendationResult(
        generated_at=datetime.now(timezone.utc),
        results=[],
        meta={**(meta or {}), "warnings": [{"code": code, "message": message}]},
    )


def recommend(
    profile: PreferenceProfile | Mapping[str, Any] | None,
    *,
    catalog: Sequence[CatalogItem] | None,
    similarity_cache: SimilarityCache | None = None,
    settings: Settings | None = None,
    top_n: int | None = None,
    settings_overrides: Mapping[str, Any] | None = None,
    trace: TraceHook | None = log_trace,
) -> RecommendationResult:
    t0 = time.monotonic()
    timings_ms: dict[str, int] = {}

    # ---- Step 1: Resolve settings for THIS run ----
    # Use injected settings (tests) or load the default config from YAML (normal runtime).
    settings = settings or get_settings()
    # Per-request overrides only touch the `scoring` subtree (ValueError on anything else).
    settings = apply_settings_overrides(settings, settings_overrides)
    effective_top_n = int(top_n if top_n is not None else settings.scoring.top_n_default)

    # ---- Step 2: Guard against unusable inputs (DataUnavailable -> empty result, never raise) ----
    if profile is None:
        return _empty_result("PROFILE_MISSING", "No preference profile supplied; nothing to rank.")
    if not isinstance(profile, PreferenceProfile):
        # Raw payloads (e.g. decoded JSON) are validated here; a bad one is an empty result.
        try:
            profile = PreferenceProfile.model_validate(profile)
        except ValidationError as exc:
            return _empty_result(
                "PROFILE_INVALID",
                "Preference profile failed validation; nothing to rank.",
                {"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]},
            )
    if not catalog:
        return _empty_result("CATALOG_EMPTY", "Destination catalog is empty; nothing to rank.")

    # ---- Step 3: Feedback adjustment (pure; the caller's profile is left untouched) ----
    adjustment = adjust_profile(profile, catalog, settings=settings)
    timings_ms["adjust_profile"] = int((time.monotonic() - t0) * 1000)

    # ---- Step 4: Content scoring against the ADJUSTED profile ----
    t_content = time.monotonic()
    content_scores = score_content(adjustment.profile, catalog, settings=settings)
    timings_ms["content"] = int((time.monotonic() - t_content) * 1000)

    # ---- Step 5: Collaborative scoring (likes come from the original ratings) ----
    # Without a cache we simply have no collaborative signal; that is not an error.
    t_collab = time.monotonic()
    collab_scores: dict[str, float] = {}
    if similarity_cache is not None:
        collab_scores = score_collaborative(profile, catalog, cache=similarity_cache)
    timings_ms["collaborative"] = int((time.monotonic() - t_collab) * 1000)

    # ---- Step 6: Hybrid blend + ranking + confidence ----
    t_rank = time.monotonic()
    has_ratings = profile.has_ratings
    results = rank(
        content_scores,
        collab_scores,
        has_ratings,
        effective_top_n,
        settings=settings,
        trace=trace,
    )
    timings_ms["rank"] = int((time.monotonic() - t_rank) * 1000)
    timings_ms["total"] = int((time.monotonic() - t0) * 1000)

    # ---- Step 7: Metadata so callers can see what was actually used ----
    warnings: list[dict[str, Any]] = []
    if adjustment.unknown_ids:
        warnings.append(
            {
                "code": "RATINGS_UNKNOWN_IDS",
                "message": "Some rated destinations are not in the catalog and were ignored.",
                "detail": {"ids": list(adjustment.unknown_ids)},
            }
        )
    if profile.liked_ids and similarity_cache is not None and not collab_scores:
        warnings.append(
            {
                "code": "COLLABORATIVE_EMPTY",
                "message": "No collaborative signal for this profile (similarity data empty or no neighbours).",
            }
        )

    weights = hybrid_weights(has_ratings, settings)
    meta = {
        "catalog": {"candidates_scored": len(content_scores)},
        "collaborative": {
            "enabled": similarity_cache is not None,
            "scored_items": len(collab_scores),
            "liked_count": len(profile.liked_ids),
        },
        "settings_snapshot": {
            "top_n": effective_top_n,
            "hybrid_weights": weights.model_dump(),
            "content_weights": settings.scoring.content_weights.model_dump(),
            "overrides_enabled": bool(settings_overrides),
        },
        "warnings": warnings,
        "timings_ms": timings_ms,
    }

    logger.info("Ranked %d destinations; returning top %d", len(content_scores), len(results))
    return RecommendationResult(
        generated_at=datetime.now(timezone.utc),
        results=results,
        adjustment=adjustment,
        meta=meta,
    )
