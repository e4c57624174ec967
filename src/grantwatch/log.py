"""Logging setup for the CLI."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def configure_logging(*, verbose: bool = False) -> None:
    """Send package logs to the current stderr. Replaces any earlier handler."""
    global _handler

    logger = logging.getLogger("grantwatch")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if _handler is not None:
        logger.removeHandler(_handler)
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
