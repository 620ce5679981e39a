"""Logging utilities for cgtrain.

Provides namespaced loggers for the training modules and the default
progress reporter used by :class:`cgtrain.optimize.ConjugateGradient`.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

_LEVEL_ENV_VAR = "CGTRAIN_LOG_LEVEL"
_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _parse_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


_DEFAULT_LEVEL = _parse_level(os.getenv(_LEVEL_ENV_VAR, "WARNING"))

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger under the ``cgtrain`` namespace.

    Args:
        name: Logger name (typically `__name__`). If None, returns the
            package root logger.

    Returns:
        Configured logger instance.

    Example:
        >>> from cgtrain.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Starting training")
    """
    if name is None:
        name = "cgtrain"

    logger_name = name if name == "cgtrain" or name.startswith("cgtrain.") else f"cgtrain.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    # Only configure if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the logging level for all cgtrain loggers.

    Args:
        level: Logging level (logging.DEBUG, logging.INFO, etc.) or string
            ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
    """
    level = _parse_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """Reconfigure handlers of every cgtrain logger.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses default.
        stream: Output stream (default: sys.stderr).
    """
    level = _parse_level(level)
    if stream is None:
        stream = sys.stderr
    formatter = logging.Formatter(format_string or _FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level


@dataclass(frozen=True)
class ProgressReport:
    """Snapshot handed to reporters every ``display_period`` iterations."""

    iteration: int
    performance: float
    gradient_norm: float
    training_rate: float
    elapsed_time: float
    selection_performance: Optional[float] = None


class LoggingReporter:
    """Reporter writing one INFO line per progress report."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or get_logger("progress")

    def __call__(self, report: ProgressReport) -> None:
        message = (
            f"Iteration {report.iteration}: performance={report.performance:.6g} "
            f"gradient_norm={report.gradient_norm:.6g} "
            f"training_rate={report.training_rate:.6g} "
            f"elapsed_time={report.elapsed_time:.3f}s"
        )
        if report.selection_performance is not None:
            message += f" selection_performance={report.selection_performance:.6g}"
        self.logger.info(message)


__all__ = [
    "LoggingReporter",
    "ProgressReport",
    "configure_logging",
    "get_logger",
    "set_log_level",
]
