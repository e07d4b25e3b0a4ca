"""Logging utilities for qoptim.

Optimization methods log their start, termination and every locally recovered
numerical degeneracy at DEBUG level through loggers created here.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_DEFAULT_STREAM: Optional[object] = None

_loggers: dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create the logger for a module.

    Loggers are cached so that handlers are attached only once. Names are
    placed under the ``qoptim`` namespace unless they already are.

    Args:
        name: Logger name (typically ``__name__``). If None, the package
            logger is returned.

    Returns:
        Configured logger instance.

    Example:
        >>> from qoptim.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("starting simplex")
    """
    if name is None:
        name = "qoptim"

    if name == "qoptim" or name.startswith("qoptim."):
        logger_name = name
    else:
        logger_name = f"qoptim.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(_DEFAULT_STREAM or sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def set_log_level(level: int | str) -> None:
    """Set the level of every qoptim logger.

    Args:
        level: Logging level (``logging.DEBUG`` ...) or its name
            (``"DEBUG"``, ``"INFO"`` ...).
    """
    level = _coerce_level(level)

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
    """Configure every qoptim logger at once.

    Existing handlers are replaced by a single stream handler. Typically
    called once at application startup.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses the default.
        stream: Output stream (default: sys.stderr).
    """
    level = _coerce_level(level)

    if stream is None:
        stream = sys.stderr

    global _DEFAULT_LEVEL, _DEFAULT_FORMAT, _DEFAULT_STREAM
    _DEFAULT_LEVEL = level
    _DEFAULT_FORMAT = format_string or _DEFAULT_FORMAT
    _DEFAULT_STREAM = stream

    formatter = logging.Formatter(_DEFAULT_FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)


__all__ = ["configure_logging", "get_logger", "set_log_level"]
