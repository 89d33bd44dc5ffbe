"""
Per-run settings overrides.

`recommend(..., settings_overrides=...)` lets a caller tune scoring knobs for one run,
for example to compare two content-weight mixes side by side. The payload is checked
against `ALLOWED_SETTINGS_OVERRIDES_TREE`, merged onto a copy of the current settings
and validated again, so a bad value fails the same way a bad YAML file would.

Not tunable per run:
- anything outside `scoring` (catalog paths, similarity endpoints, API keys, cache dir);
- `scoring.theme`, the clamp bounds every adjusted profile must respect.
"""

from __future__ import annotations

from typing import Any, Mapping

from tripmatch.config.settings import Settings

# True: any key below this node may be overridden.
# dict: only the listed children, checked recursively.
ALLOWED_SETTINGS_OVERRIDES_TREE: dict[str, Any] = {
    "scoring": {
        "top_n_default": True,
        "content_weights": True,
        "climate": True,
        "budget": True,
        "region": True,
        "duration_match": True,
        "distance": True,
        "hybrid": True,
        "confidence_bands": True,
    },
}


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def _filter_overrides(
    overrides: Mapping[str, Any],
    *,
    allowed_tree: Mapping[str, Any],
    path: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Return `overrides` unchanged in content, raising on the first key outside the tree."""
    out: dict[str, Any] = {}
    for key, value in overrides.items():
        key_path = (*path, key)
        rule = allowed_tree.get(key)
        if rule is None:
            raise ValueError(f"settings_overrides contains a disallowed key: '{'.'.join(key_path)}'")
        if rule is True:
            out[key] = value
        elif isinstance(value, Mapping):
            out[key] = _filter_overrides(value, allowed_tree=rule, path=key_path)
        else:
            raise ValueError(f"settings_overrides key '{'.'.join(key_path)}' must be a mapping")
    return out


def apply_settings_overrides(settings: Settings, overrides: Mapping[str, Any] | None) -> Settings:
    """Return a re-validated copy of `settings` with the allowed overrides applied.

    Empty or missing overrides return `settings` itself.
    """
    if not overrides:
        return settings
    allowed = _filter_overrides(overrides, allowed_tree=ALLOWED_SETTINGS_OVERRIDES_TREE)
    return Settings.model_validate(_deep_merge(settings.model_dump(mode="python"), allowed))
