"""
Logging configuration.

We use a YAML logging config (`src/tripmatch/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `TRIPMATCH_LOG_LEVEL`).
"""

from __future__ import annotations

import copy
import logging.config

from tripmatch.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure the Python logging system based on packaged YAML config + settings.

    `level` (e.g. from a CLI `--trace` flag) wins over the configured level.
    """
    settings = get_settings()
    # dictConfig mutates nested dicts; never hand it the cached mapping.
    config = copy.deepcopy(get_logging_config())

    effective = (level or settings.app.log_level).upper()
    config.setdefault("root", {})["level"] = effective
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = effective

    logging.config.dictConfig(config)
