"""Logging setup shared by the library and the server."""

from __future__ import annotations

import logging
import sys

from learnpath.config import LEARNPATH_LOG_LEVEL

# Attributes present on every LogRecord; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()) | {
    "message",
    "asctime",
    "taskName",
}

_configured = False


class ExtraFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not extras:
            return base
        rendered = " ".join(f"{key}={value!r}" for key, value in sorted(extras.items()))
        return f"{base} | {rendered}"


def configure_logging(level: str | int | None = None) -> None:
    """Install a stderr handler on the ``learnpath`` and ``server`` loggers.

    Safe to call more than once; only the level is updated on later calls.
    """
    global _configured
    resolved = level if level is not None else LEARNPATH_LOG_LEVEL
    if isinstance(resolved, str):
        resolved = resolved.upper()

    for name in ("learnpath", "server"):
        logger = logging.getLogger(name)
        logger.setLevel(resolved)
        if not _configured:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(
                ExtraFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
            logger.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring output on first use."""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)
