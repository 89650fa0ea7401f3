"""
================================================================================
Logging Setup
================================================================================

Centralized Loguru configuration for the authentication engine.

Components never configure sinks themselves: they receive a bound logger
through their constructor (``logger.bind(component=...)``). Applications call
``configure_logging()`` once at start-up.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger


DEFAULT_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | {message}"
)


def _default_component(record) -> None:
    record["extra"].setdefault("component", "-")


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
    format_str: str = DEFAULT_FORMAT,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> List[int]:
    """
    Replace Loguru's default sink with the engine's console (and file) sinks.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to the
            ``LOG_LEVEL`` environment variable, then INFO.
        log_file: Optional path of a rotating log file
        format_str: Loguru format string
        rotation: File rotation threshold
        retention: File retention period

    Returns:
        Ids of the added sinks (pass to ``logger.remove`` to detach them)
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logger.remove()
    logger.configure(patcher=_default_component)

    sink_ids = [
        logger.add(
            sys.stderr,
            level=log_level,
            format=format_str,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )
    ]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        sink_ids.append(
            logger.add(
                str(log_path),
                level=log_level,
                format=format_str.replace("{level: <8}", "{level}"),
                rotation=rotation,
                retention=retention,
                compression="zip",
            )
        )

    logger.bind(component="logging").debug(f"Logger initialized with level: {log_level}")
    return sink_ids


def component_logger(name: str):
    """Logger bound to a component name."""
    return logger.bind(component=name)


__all__ = [
    "DEFAULT_FORMAT",
    "configure_logging",
    "component_logger",
]
