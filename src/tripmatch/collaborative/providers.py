"""
Similarity providers.

The scoring core never computes the item-item similarity matrix itself; a provider
supplies it on (re)fetch:

- `StaticSimilarityProvider`: an in-memory matrix or row list (tests, notebooks).
- `JsonFileSimilarityProvider`: a local JSON export (rows or an already-grouped mapping).
- `RestSimilarityProvider`: a PostgREST-style table endpoint (`item_similarity`), with the
  last good download kept on disk and served if the upstream is unreachable.

`build_similarity_provider(settings)` picks one from `similarity.source`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from tripmatch.collaborative.similarity import (
    SimilarityMatrix,
    SimilarityProvider,
    build_similarity_matrix,
    freeze_matrix,
)
from tripmatch.config.settings import Settings
from tripmatch.core.cache import FileCache
from tripmatch.core.env import resolve_project_path
from tripmatch.core.http import get_json

logger = logging.getLogger(__name__)


def matrix_from_payload(payload: Any) -> SimilarityMatrix:
    """Build a matrix from either a row list or an `{item_id: [neighbours]}` mapping."""
    if isinstance(payload, Mapping):
        return freeze_matrix(payload)
    if isinstance(payload, list):
        return build_similarity_matrix(payload)
    raise ValueError(f"Unsupported similarity payload type: {type(payload).__name__}")


class StaticSimilarityProvider:
    """Serves a fixed matrix; `replace()` swaps it (the cache still needs `invalidate()`)."""

    def __init__(self, payload: Mapping[str, Iterable[Any]] | list[Any] | None = None):
        self._matrix = matrix_from_payload(payload if payload is not None else {})

    def replace(self, payload: Mapping[str, Iterable[Any]] | list[Any]) -> None:
        self._matrix = matrix_from_payload(payload)

    def fetch(self) -> SimilarityMatrix:
        return self._matrix


class JsonFileSimilarityProvider:
    """Reads similarity rows from a JSON file on every fetch."""

    def __init__(self, path: str | Path):
        self._path = resolve_project_path(path)

    @property
    def path(self) -> Path:
        return self._path

    def fetch(self) -> SimilarityMatrix:
        logger.info("Loading item similarity from %s", self._path)
        payload = json.loads(self._path.read_text(encoding="utf-8"))
        return matrix_from_payload(payload)


class RestSimilarityProvider:
    """Fetches `item_id, neighbour_id, sim` rows from a PostgREST-style endpoint."""

    CACHE_NAMESPACE = "similarity"

    def __init__(self, settings: Settings, cache: FileCache | None = None):
        cfg = settings.similarity.rest
        if not cfg.base_url:
            raise ValueError("similarity.rest.base_url is required for the REST similarity source")
        self._url = f"{cfg.base_url.rstrip('/')}/rest/v1/{cfg.table}"
        self._api_key = cfg.api_key
        self._timeout_seconds = float(cfg.timeout_seconds)
        self._cache = cache

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            return {}
        return {"apikey": self._api_key, "Authorization": f"Bearer {self._api_key}"}

    def _download(self) -> list[Any]:
        payload = get_json(
            self._url,
            params={"select": "item_id,neighbour_id,sim"},
            headers=self._headers(),
            timeout_seconds=self._timeout_seconds,
        )
        if not isinstance(payload, list):
            raise ValueError("Similarity endpoint returned a non-list payload")
        return payload

    def fetch(self) -> SimilarityMatrix:
        try:
            rows = self._download()
        except Exception:
            # Stale-if-error: an old matrix beats disabling collaborative scoring.
            stale = self._cache.get_stale(self.CACHE_NAMESPACE, self._url) if self._cache else None
            if not isinstance(stale, list):
                raise
            meta = self._cache.get_entry_meta(self.CACHE_NAMESPACE, self._url) or {}
            logger.warning(
                "Similarity endpoint unavailable; serving snapshot from %s",
                meta.get("created_at_unix"),
            )
            return build_similarity_matrix(stale)

        if self._cache is not None:
            self._cache.set(self.CACHE_NAMESPACE, self._url, rows)
        return build_similarity_matrix(rows)


def build_similarity_provider(settings: Settings) -> SimilarityProvider | None:
    """Create the provider selected by `similarity.source` (None for `none`)."""
    source = settings.similarity.source
    if source == "file":
        return JsonFileSimilarityProvider(settings.similarity.path)
    if source == "rest":
        cache = FileCache(resolve_project_path(settings.cache.dir), enabled=settings.cache.enabled)
        return RestSimilarityProvider(settings, cache)
    return None
