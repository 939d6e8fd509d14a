"""Process-wide logging for ``doughflow``.

Only entrypoints touch handlers. The CLI calls :func:`configure_logging` once
after reading settings; every other module asks :func:`get_logger` for a
``"doughflow.<module>"`` logger and emits records without caring where they
go. Until configuration happens the package logger carries a ``NullHandler``
so importing the library never prints anything.

Records emitted by the engine are few: WARNING for skipped custom dates and
unknown row values, DEBUG for truncated or unknown recurrences, INFO for
store and CLI summaries.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "doughflow"
LEVEL_ENV_VAR = "DOUGHFLOW_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def _coerce_level(value: int | str | None) -> int | None:
    """Map ``20``, ``"20"`` or ``"info"`` to a numeric level; ``None`` when unknown."""

    if isinstance(value, int):
        return value
    if not value:
        return None
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else None


def resolve_level(level: int | str | None = None) -> int:
    """Explicit ``level`` first, then ``$DOUGHFLOW_LOG_LEVEL``, then INFO.

    An explicit but unrecognized level falls straight back to INFO; the
    environment is only consulted when ``level`` is ``None``.
    """

    if level is not None:
        return _coerce_level(level) or logging.INFO
    return _coerce_level(os.getenv(LEVEL_ENV_VAR)) or logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach a single ``StreamHandler`` to the package logger.

    Later calls return the already-configured logger unchanged. ``stream``
    defaults to the current ``sys.stderr``.
    """

    global _configured
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _configured:
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    # The root logger stays untouched; no double emission.
    logger.propagate = False

    _configured = True
    return logger


def reset_logging() -> None:
    """Undo :func:`configure_logging` (tests)."""

    global _configured
    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _configured = False


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "LOG_FORMAT",
    "configure_logging",
    "get_logger",
    "reset_logging",
    "resolve_level",
]
