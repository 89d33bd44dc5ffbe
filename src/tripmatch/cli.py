"""
TripMatch CLI entrypoint.

This CLI is intended for quick local demos and debugging against JSON exports of the
catalog, a saved profile and (optionally) the similarity matrix.
It delegates all recommendation logic to `tripmatch.recommender.recommend.recommend`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from tripmatch.catalog.loader import load_catalog, load_profile
from tripmatch.collaborative.providers import JsonFileSimilarityProvider, build_similarity_provider
from tripmatch.collaborative.similarity import SimilarityCache
from tripmatch.config.settings import get_settings
from tripmatch.core.logging import configure_logging
from tripmatch.domain.models import THEMES, ScoreRecord
from tripmatch.feedback.adjuster import adjust_profile
from tripmatch.recommender.rank import log_trace
from tripmatch.recommender.recommend import recommend
from tripmatch.scoring.explain import one_line_summary, reasons

logger = logging.getLogger(__name__)


def _cmd_recommend(args: argparse.Namespace) -> int:
    """Handle the `recommend` subcommand."""
    settings = get_settings()
    profile = load_profile(args.profile)
    catalog = load_catalog(args.catalog or settings.catalog.path)

    if args.similarity:
        provider = JsonFileSimilarityProvider(args.similarity)
    else:
        provider = build_similarity_provider(settings)
    cache = SimilarityCache(provider) if provider is not None else None

    # Keep the final score records so the text output can explain each pick.
    records: dict[str, ScoreRecord] = {}

    def collect(position: int, record: ScoreRecord, confidence: int) -> None:
        records[record.item_id] = record
        log_trace(position, record, confidence)

    result = recommend(
        profile,
        catalog=catalog,
        similarity_cache=cache,
        settings=settings,
        top_n=args.top_n,
        trace=collect,
    )

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    by_id = {d.id: d for d in catalog}
    print(f"Generated at: {result.generated_at.isoformat()}")
    for w in result.meta.get("warnings", []):
        print(f"Warning: {w['message']}")
    if not result.results:
        print("No recommendations.")
        return 0

    print("Top results:")
    for i, rec in enumerate(result.results, start=1):
        dest = by_id.get(rec.item_id)
        label = ", ".join(x for x in (dest.city, dest.country) if x) if dest else ""
        print(f"{i:>2}. {rec.item_id} {label}  confidence={rec.confidence}%")
        record = records.get(rec.item_id)
        if record is not None:
            print(f"    {one_line_summary(record)}")
            for reason in reasons(record):
                print(f"    - {reason}")
    return 0


def _cmd_adjust(args: argparse.Namespace) -> int:
    """Handle the `adjust` subcommand (show how likes/dislikes move the theme vector)."""
    settings = get_settings()
    profile = load_profile(args.profile)
    catalog = load_catalog(args.catalog or settings.catalog.path)

    adjustment = adjust_profile(profile, catalog, settings=settings)
    if args.json:
        print(json.dumps(adjustment.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    before = profile.theme_vector()
    after = adjustment.profile.theme_vector()
    print(f"Liked: {len(adjustment.liked_ids)}  Disliked: {len(adjustment.disliked_ids)}")
    if adjustment.unknown_ids:
        print(f"Unknown ids skipped: {', '.join(adjustment.unknown_ids)}")
    for theme, b, a in zip(THEMES, before, after):
        step = adjustment.adjustments[theme]
        print(f"  {theme:<10} {b:>3.0f} -> {a:>3.0f}  ({step:+d})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the TripMatch CLI."""
    parser = argparse.ArgumentParser(prog="tripmatch")
    parser.add_argument("--trace", action="store_true", help="Log every sub-score of ranked items (DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("recommend", help="Rank catalog destinations for a saved preference profile.")
    rec.add_argument("--profile", required=True, help="Path to a profile JSON file")
    rec.add_argument("--catalog", default=None, help="Catalog JSON (default: catalog.path from config)")
    rec.add_argument(
        "--similarity",
        default=None,
        help="Similarity JSON export (rows or grouped mapping); overrides similarity.source",
    )
    rec.add_argument("--top-n", type=int, default=None)
    rec.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    rec.set_defaults(func=_cmd_recommend)

    adj = sub.add_parser("adjust", help="Show the feedback adjustment applied to a profile.")
    adj.add_argument("--profile", required=True)
    adj.add_argument("--catalog", default=None)
    adj.add_argument("--json", action="store_true")
    adj.set_defaults(func=_cmd_adjust)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m tripmatch.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.trace else None)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (OSError, ValueError) as exc:
        # Missing files, invalid JSON and validation errors are user errors, not crashes.
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
