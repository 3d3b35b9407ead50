"""Shared logging helpers for ledgersync."""

from __future__ import annotations

import logging
import os

type SyncLogger = logging.Logger | logging.LoggerAdapter[logging.Logger]

_LEVEL_NAMES: dict[str, int] = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def level_from_environment(default: int = logging.INFO) -> int:
    """Map ``LOG_LEVEL`` onto a logging level, falling back to ``default``."""

    name = os.getenv("LOG_LEVEL", "").strip().upper()
    return _LEVEL_NAMES.get(name, default)


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    comes from ``LOG_LEVEL`` unless given explicitly, and the format is terse enough
    for CI logs. Pass ``force=True`` to reconfigure during tests or specialised
    entry points.
    """

    logging.basicConfig(
        level=level if level is not None else level_from_environment(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
