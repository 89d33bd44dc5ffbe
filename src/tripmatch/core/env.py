"""
Environment + project-root helpers.

The catalog, similarity export and snapshot cache are configured as repo-relative paths
(`data/catalogs/destinations.json`, `.cache/tripmatch`). The CLI and the test suite can be
started from any directory, so those paths are resolved against the project root, and the
repo-local `.env` (which usually holds `TRIPMATCH_SIMILARITY_KEY`) is read from there too.

Root lookup order:
1. `TRIPMATCH_PROJECT_ROOT`
2. the directory holding `TRIPMATCH_ENV_FILE`
3. the first parent of the CWD, then of this module, that looks like the repo
4. the CWD
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# A directory counts as the repo root if it holds any of these files...
_ROOT_FILES = (".env", ".git", "pyproject.toml")
# ...or all of these directories.
_ROOT_DIRS = ("src", "data")


def _is_project_root(path: Path) -> bool:
    if any((path / name).exists() for name in _ROOT_FILES):
        return True
    return all((path / name).is_dir() for name in _ROOT_DIRS)


def _search_upwards(start: Path) -> Path | None:
    start = start.resolve()
    for candidate in (start, *start.parents):
        if _is_project_root(candidate):
            return candidate
    return None


def _env_file_override() -> Path | None:
    raw = os.getenv("TRIPMATCH_ENV_FILE")
    return Path(raw).expanduser().resolve() if raw else None


@lru_cache
def get_project_root() -> Path:
    """Return the best-guess project root directory (cached)."""
    explicit_root = os.getenv("TRIPMATCH_PROJECT_ROOT")
    if explicit_root:
        return Path(explicit_root).expanduser().resolve()

    env_file = _env_file_override()
    if env_file is not None:
        return env_file.parent

    for start in (Path.cwd(), Path(__file__).parent):
        found = _search_upwards(start)
        if found is not None:
            return found
    return Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project's `.env` once; returns the file that was loaded, if any.

    Variables already present in the process environment always win.
    """
    env_path = _env_file_override() or get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a possibly-relative path against the project root."""
    p = Path(path).expanduser()
    return p if p.is_absolute() else (get_project_root() / p).resolve()
