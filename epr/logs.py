from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s"

_LEVELS = {"DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"}

log = logging.getLogger("epr")


def setup_logging(level: str | int = logging.INFO) -> None:
    """Configure the root logger with a single stderr handler.

    Existing handlers are cleared so repeated calls do not duplicate output.
    The proxy inherits stdout/stderr, so its own output interleaves with ours.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if root.hasHandlers():
        root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def log_event(level: str, message: str, pool: str | None = None, namespace: str | None = None) -> None:
    """Log a controller event, prefixed with the pool it concerns."""
    lvl = level.upper()
    if lvl not in _LEVELS:
        lvl = "INFO"
    if lvl == "WARN":
        lvl = "WARNING"
    prefix = ""
    if pool and namespace:
        prefix = f"[{namespace}/{pool}] "
    elif pool:
        prefix = f"[{pool}] "
    log.log(logging.getLevelName(lvl), f"{prefix}{message}")
