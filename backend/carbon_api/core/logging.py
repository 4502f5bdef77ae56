# backend/carbon_api/core/logging.py
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def resolve_log_level(level: str | None, debug: bool = False) -> int:
    if debug:
        return logging.DEBUG
    value = logging.getLevelName((level or "INFO").strip().upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str | None = None, debug: bool = False) -> None:
    """
    Install one stream handler on the root logger.
    Safe to call more than once (app factory + tests); only the level is updated on repeat calls.
    """
    global _configured

    root = logging.getLogger()
    root.setLevel(resolve_log_level(level, debug))

    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True
