"""Logging setup for the ledgerkit logger hierarchy."""

import logging
import sys
from typing import Any, Optional, Union

_LOGGER_PREFIX = "ledgerkit"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_handler: Optional[logging.Handler] = None


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time."""

    def __init__(self, level=logging.NOTSET):
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


def parse_level(level: Union[int, str]) -> int:
    """Convert a level name such as 'info' to its numeric value.

    Raises:
        ValueError: If the level name is unknown
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


def configure_logging(level: Union[int, str] = logging.WARNING, stream: Any = None) -> None:
    """Configure the ledgerkit logger hierarchy (idempotent).

    A second call only changes the level; the handler is installed once.
    Without an explicit stream, records go to the current ``sys.stderr``.
    """
    global _handler

    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.setLevel(parse_level(level))

    if _handler is None:
        _handler = logging.StreamHandler(stream) if stream is not None else _StderrHandler()
        _handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(_handler)


def reset_logging() -> None:
    """Remove the installed handler. Used by tests."""
    global _handler

    logger = logging.getLogger(_LOGGER_PREFIX)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)
