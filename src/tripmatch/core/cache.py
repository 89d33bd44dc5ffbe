from __future__ import annotations

import json
import time
from hashlib import sha256
from pathlib import Path
from typing import Any

"""
Simple on-disk JSON snapshot store.

The REST similarity provider writes every successful download here so that, when the
upstream store is unreachable, the last good similarity rows can still be served
("stale-if-error"). Keys are hashed (SHA-256) to avoid filesystem path issues.
"""


class FileCache:
    """A filesystem-backed store keyed by (namespace, key)."""

    def __init__(self, base_dir: Path, enabled: bool = True):
        self._base_dir = base_dir
        self._enabled = enabled

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _key_path(self, namespace: str, key: str) -> Path:
        digest = sha256(f"{namespace}:{key}".encode("utf-8")).hexdigest()
        return self._base_dir / namespace / f"{digest}.json"

    def _read(self, namespace: str, key: str) -> dict[str, Any] | None:
        if not self._enabled:
            return None
        path = self._key_path(namespace, key)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        return raw if isinstance(raw, dict) else None

    def get_entry_meta(self, namespace: str, key: str) -> dict[str, int] | None:
        """Return envelope metadata (`created_at_unix`) if an entry is present."""
        raw = self._read(namespace, key)
        if raw is None or "created_at_unix" not in raw:
            return None
        return {"created_at_unix": int(raw["created_at_unix"])}

    def get_stale(self, namespace: str, key: str) -> Any | None:
        """Read a stored value regardless of age; otherwise return None."""
        raw = self._read(namespace, key)
        if raw is None:
            return None
        return raw.get("value")

    def set(self, namespace: str, key: str, value: Any) -> None:
        """Write a JSON-serializable value to disk.

        Writes via a temporary file + atomic replace to avoid partial/corrupt files.
        """
        if not self._enabled:
            return None

        path = self._key_path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)

        payload = {"created_at_unix": int(time.time()), "value": value}
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
