"""Logging for the ``spending_zones`` package.

Library modules only ever call ``get_logger("spending_zones.<module>")``; the
package root logger carries a ``NullHandler`` until an entrypoint opts in, so
embedding applications see nothing unless they configure logging themselves.

The CLI opts in through :func:`configure_logging` on every invocation. The
level comes from ``--log-level``, else ``SPENDING_ZONES_LOG_LEVEL`` (which may
be set in a local ``.env``), else ``WARNING`` so command output on stdout stays
clean. Records go to whatever ``sys.stderr`` is at emit time.
"""

from __future__ import annotations

import logging
import os
import sys

PKG_LOGGER_NAME = "spending_zones"
LEVEL_ENV_VAR = "SPENDING_ZONES_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING

_FORMAT = "%(levelname)s %(name)s: %(message)s"


class _StderrHandler(logging.StreamHandler):
    """``StreamHandler`` that looks up ``sys.stderr`` per record."""

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, _value) -> None:
        pass


def resolve_level(level: int | str | None = None) -> int:
    """Return a numeric level from an explicit value or the environment.

    Accepts level names in any case (``"debug"``) or numeric strings. Raises
    ``ValueError`` for an unknown name, whether passed in or read from
    ``SPENDING_ZONES_LOG_LEVEL``.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV_VAR) or None
        if level is None:
            return DEFAULT_LEVEL
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelNamesMapping().get(name)
    if numeric is None:
        raise ValueError(f"Unknown log level: {level!r}")
    return numeric


def configure_logging(level: int | str | None = None) -> int:
    """Attach the stderr handler to the package logger and set its level.

    Safe to call repeatedly: the handler is added once and later calls only
    change the level. Returns the level applied.
    """

    resolved = resolve_level(level)
    logger = logging.getLogger(PKG_LOGGER_NAME)

    handler = next((h for h in logger.handlers if isinstance(h, _StderrHandler)), None)
    if handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel(resolved)
    return resolved


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["PKG_LOGGER_NAME", "LEVEL_ENV_VAR", "resolve_level", "configure_logging", "get_logger"]
