"""
Small explainability formatting helpers.

Used by the CLI and by trace logging to print compact summaries of score records.
"""

from __future__ import annotations

from tripmatch.domain.models import ScoreRecord


def one_line_summary(record: ScoreRecord) -> str:
    """Render a compact single-line summary for a score record (omitted factors skipped)."""
    parts = [f"hybrid={record.hybrid_score:.3f}", f"content={record.content_score:.3f}"]
    if record.collab_score:
        parts.append(f"collab={record.collab_score:.3f}")
    for name, value in record.sub_scores().items():
        if value is not None:
            parts.append(f"{name.removesuffix('_score')}={value:.3f}")
    return " | ".join(parts)


def reasons(record: ScoreRecord, limit: int = 4) -> list[str]:
    """Flatten the per-factor reasons stored on a score record."""
    out: list[str] = []
    for entry in record.details.values():
        out.extend(entry.get("reasons") or [])
    return out[:limit]
