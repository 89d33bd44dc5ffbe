"""
Destination catalog + profile loaders.

The catalog is a local JSON export (default: `data/catalogs/destinations.json`) holding
destinations with theme scores, monthly temperatures, budget level and coordinates. We
validate it into typed Pydantic models so scoring code can assume a consistent shape.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from tripmatch.core.env import resolve_project_path
from tripmatch.domain.models import CatalogItem, PreferenceProfile


_CATALOG_ADAPTER = TypeAdapter(list[CatalogItem])


def load_catalog(path: str | Path) -> list[CatalogItem]:
    """Load and validate a destination catalog JSON file (a list of destinations).

    A `{"destinations": [...]}` wrapper object is accepted too.
    """
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if isinstance(payload, dict) and "destinations" in payload:
        payload = payload["destinations"]
    return _CATALOG_ADAPTER.validate_python(payload)


def load_profile(path: str | Path) -> PreferenceProfile:
    """Load and validate a preference profile JSON file (camelCase or snake_case keys)."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    return PreferenceProfile.model_validate(payload)
