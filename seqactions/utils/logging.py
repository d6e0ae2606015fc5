"""Logging configuration for the CLI and the API server."""

from __future__ import annotations

import logging
import sys

_LIFECYCLE_LOGGER = "seqactions.engine.driver"


def setup_logging(level: str = "INFO", lifecycle_level: str | None = None) -> None:
    """Configure the root logger for simulation output.

    *lifecycle_level* overrides the verbosity of the per-callback lifecycle
    trace (``seqactions.engine.driver``), which is very chatty at DEBUG.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)-5s] %(name)-25s | %(message)s",
        datefmt="%H:%M:%S",
    ))

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    if lifecycle_level is not None:
        logging.getLogger(_LIFECYCLE_LOGGER).setLevel(
            getattr(logging, lifecycle_level.upper(), numeric_level)
        )
