"""Logging for the ``budget_ledger`` package.

Ledger modules only ever call ``get_logger("budget_ledger.<module>")``; they
never attach handlers. Output is switched on by the host through
:func:`configure_logging`, usually via :func:`budget_ledger.config.configure`,
which takes the level from ``LedgerSettings.log_level``. Until then the
package logger carries a ``NullHandler`` and records propagate to whatever the
host (or pytest's ``caplog``) has on the root logger.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

PACKAGE_LOGGER = "budget_ledger"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def level_number(level: int | str) -> int:
    """``"debug"``, ``"DEBUG"``, ``"10"`` and ``10`` all map to ``logging.DEBUG``."""

    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level!r}")
    return value


def configure_logging(
    level: int | str = "INFO",
    *,
    fmt: str = DEFAULT_FORMAT,
    stream: IO[str] = sys.stderr,
) -> None:
    """Route ledger records to ``stream``; later calls are no-ops."""

    global _configured
    if _configured:
        return

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(level_number(level))
    # The host's root handlers would print every ledger record a second time.
    logger.propagate = False
    _configured = True


def reset_logging() -> None:
    """Drop ledger handlers and restore propagation (used between tests)."""

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
    "PACKAGE_LOGGER",
    "DEFAULT_FORMAT",
    "level_number",
    "configure_logging",
    "reset_logging",
    "get_logger",
]
