"""Package-wide logging setup for scionpath.

Every module obtains its logger through :func:`get_logger`; records flow to a
single handler installed on the ``scionpath`` root logger. The initial level
can be taken from the ``SCIONPATH_LOG_LEVEL`` environment variable.
"""

import logging
import os
import sys
from typing import Optional

ROOT_LOGGER_NAME = "scionpath"
LOG_LEVEL_ENV = "SCIONPATH_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_root_configured = False


def _level_from_env(default: int) -> int:
    """Resolve a level name or number from ``SCIONPATH_LOG_LEVEL``."""
    value = os.getenv(LOG_LEVEL_ENV)
    if not value:
        return default
    value = value.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else default


def setup_root_logger(
    level: Optional[int] = None,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the single handler of the ``scionpath`` logger.

    Subsequent calls are no-ops until :func:`reset_logging` is called.

    Args:
        level: Logging level; defaults to ``SCIONPATH_LOG_LEVEL`` or INFO.
        format_string: Record format; defaults to ``DEFAULT_FORMAT``.
        handler: Target handler; defaults to a stdout ``StreamHandler``.
    """
    global _root_configured

    if _root_configured:
        return

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level if level is not None else _level_from_env(logging.INFO))
    root.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root.addHandler(handler)

    # pytest's caplog hooks the global root logger
    root.propagate = True

    _root_configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger below the ``scionpath`` root.

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        Logger that inherits handler and level from the package root.
    """
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Change the level of the package root logger and its handlers."""
    setup_root_logger()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)


def enable_debug_logging() -> None:
    """Log per-candidate decisions (orientation, on-path, shortcut, duplicates)."""
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the installed handler so the next call configures from scratch."""
    global _root_configured
    _root_configured = False

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


setup_root_logger()
