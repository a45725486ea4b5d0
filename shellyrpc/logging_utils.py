"""Loguru helpers for turning on shellyrpc's library logging."""

from __future__ import annotations

import sys
from typing import Any

from loguru import logger

_SINK_IDS: dict[str, int] = {}

_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | <cyan>{name}</cyan> | <level>{message}</level>"


def configure_logging(level: str = "INFO", sink: Any = None) -> int:
    """Enable shellyrpc logs at ``level`` on ``sink`` (stderr by default).

    Calling it again with the same sink replaces the previous registration.
    Returns the loguru sink id.
    """
    target = sink if sink is not None else sys.stderr
    key = repr(target)
    previous = _SINK_IDS.pop(key, None)
    if previous is not None:
        logger.remove(previous)
    sink_id = logger.add(
        target,
        level=level.upper(),
        format=_FORMAT,
        filter="shellyrpc",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[key] = sink_id
    logger.enable("shellyrpc")
    return sink_id


def disable_logging() -> None:
    """Remove sinks added by configure_logging() and silence the package."""
    for sink_id in _SINK_IDS.values():
        logger.remove(sink_id)
    _SINK_IDS.clear()
    logger.disable("shellyrpc")
