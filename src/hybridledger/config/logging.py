"""Shared logging helpers for hybridledger."""

from __future__ import annotations

import logging
import os


def resolve_log_level(value: str | None = None) -> int:
    """Translate a level name such as ``"debug"`` into a ``logging`` constant."""

    name = (value if value is not None else os.getenv("LOG_LEVEL", "INFO")).strip().upper()
    level = logging.getLevelNamesMapping().get(name)
    return level if level is not None else logging.INFO


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    defaults to ``LOG_LEVEL`` (INFO when unset) and a terse format suitable for
    service logs. Pass ``force=True`` to reconfigure during tests or specialised
    entry points.
    """

    logging.basicConfig(
        level=level if level is not None else resolve_log_level(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
