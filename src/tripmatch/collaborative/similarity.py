"""
Item-item similarity structure + process-wide cache.

The similarity matrix is computed elsewhere (a database job refreshes it after new
ratings land) and handed to us as rows of `(item_id, neighbour_id, sim)`. We reshape it
into `{item_id: (Neighbor, ...)}` for lookups from the liked item's side.

`SimilarityCache` owns the one piece of shared mutable state in the scoring pipeline:
- `get()` lazily fetches from a provider on first use and then serves the same snapshot;
- `invalidate()` drops the snapshot so the next `get()` refetches (called by whoever
  knows the upstream store changed);
- population and invalidation are serialized by a lock, so concurrent first requests
  trigger a single fetch and an invalidation never interleaves with a half-built snapshot.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Neighbor:
    """One similarity entry: `neighbor_id` is `weight`-similar to the owning item."""

    neighbor_id: str
    weight: float


SimilarityMatrix = Mapping[str, tuple[Neighbor, ...]]

EMPTY_MATRIX: SimilarityMatrix = MappingProxyType({})


class SimilarityProvider(Protocol):
    """Anything that can produce a full similarity matrix on demand."""

    def fetch(self) -> SimilarityMatrix: ...


def _row_value(row: Any, *names: str) -> Any:
    if isinstance(row, Mapping):
        for name in names:
            if name in row:
                return row[name]
        return None
    return None


def build_similarity_matrix(rows: Iterable[Any]) -> SimilarityMatrix:
    """Reshape similarity rows into an immutable `{item_id: (Neighbor, ...)}` mapping.

    Accepts mappings with `item_id` / `neighbour_id` (or `neighbor_id`) / `sim` (or
    `weight`) keys, or `(item_id, neighbour_id, sim)` triples. Rows with missing ids or
    a weight outside (0, 1] are skipped with a warning; neighbour order is preserved.
    """
    grouped: dict[str, list[Neighbor]] = {}
    skipped = 0
    for row in rows:
        if isinstance(row, (list, tuple)) and len(row) == 3:
            item_id, neighbor_id, sim = row
        else:
            item_id = _row_value(row, "item_id")
            neighbor_id = _row_value(row, "neighbour_id", "neighbor_id")
            sim = _row_value(row, "sim", "weight")

        try:
            weight = float(sim)
        except (TypeError, ValueError):
            weight = math.nan
        if item_id is None or neighbor_id is None or not (0 < weight <= 1):
            skipped += 1
            continue
        grouped.setdefault(str(item_id), []).append(Neighbor(str(neighbor_id), weight))

    if skipped:
        logger.warning("Skipped %d malformed similarity row(s)", skipped)
    return MappingProxyType({k: tuple(v) for k, v in grouped.items()})


def freeze_matrix(matrix: Mapping[str, Iterable[Any]]) -> SimilarityMatrix:
    """Turn an already-grouped `{item_id: [neighbor, ...]}` mapping into a snapshot.

    Neighbours may be `Neighbor` objects, `{"id", "sim"}` dicts, or `(id, sim)` pairs.
    """
    rows: list[tuple[Any, Any, Any]] = []
    for item_id, neighbors in matrix.items():
        for n in neighbors:
            if isinstance(n, Neighbor):
                rows.append((item_id, n.neighbor_id, n.weight))
            elif isinstance(n, Mapping):
                rows.append(
                    (item_id, _row_value(n, "id", "neighbour_id", "neighbor_id"), _row_value(n, "sim", "weight"))
                )
            elif isinstance(n, (list, tuple)) and len(n) == 2:
                rows.append((item_id, n[0], n[1]))
            else:
                rows.append((item_id, None, None))
    return build_similarity_matrix(rows)


class SimilarityCache:
    """Lazily populated, explicitly invalidated similarity matrix snapshot."""

    def __init__(self, provider: SimilarityProvider | None):
        self._provider = provider
        self._snapshot: SimilarityMatrix | None = None
        self._lock = threading.Lock()
        self._fetch_count = 0

    @property
    def is_populated(self) -> bool:
        return self._snapshot is not None

    @property
    def fetch_count(self) -> int:
        """Number of provider fetches attempted so far (useful for ops/debugging)."""
        return self._fetch_count

    def get(self) -> SimilarityMatrix:
        """Return the cached matrix, fetching it first if needed.

        Never raises: a failing provider is logged and yields an empty matrix, which is
        not cached so the next call retries.
        """
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        with self._lock:
            # Another thread may have populated it while we waited for the lock.
            if self._snapshot is not None:
                return self._snapshot
            if self._provider is None:
                return EMPTY_MATRIX

            self._fetch_count += 1
            logger.info("Fetching item similarity matrix")
            try:
                fetched = self._provider.fetch()
            except Exception as exc:
                logger.warning("Item similarity fetch failed; collaborative scoring disabled: %s", exc)
                return EMPTY_MATRIX

            snapshot = fetched if isinstance(fetched, MappingProxyType) else freeze_matrix(fetched)
            self._snapshot = snapshot
            logger.info("Cached item similarity matrix for %d items", len(snapshot))
            return snapshot

    def invalidate(self) -> None:
        """Drop the cached matrix; the next `get()` fetches a fresh one."""
        with self._lock:
            logger.info("Invalidating item similarity cache")
            self._snapshot = None
