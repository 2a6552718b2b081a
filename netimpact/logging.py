"""Centralized logging configuration for netimpact.

Every module logs through :func:`get_logger`, so all records flow through the
single ``netimpact`` logger configured here. Worker processes of the impact
analyzer cannot inherit that configuration directly; the parent exports its
level with :func:`export_log_level` and each worker re-applies it with
:func:`apply_env_log_level`.
"""

import logging
import os
import sys
from typing import Optional

ROOT_LOGGER_NAME = "netimpact"
LOG_LEVEL_ENV = "NETIMPACT_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def _package_logger() -> logging.Logger:
    return logging.getLogger(ROOT_LOGGER_NAME)


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the one handler of the ``netimpact`` logger.

    Does nothing once configured; call :func:`reset_logging` to start over.

    Args:
        level: Initial level.
        format_string: Record format; defaults to ``DEFAULT_FORMAT``.
        handler: Destination; defaults to a stdout stream handler.
    """
    global _configured
    if _configured:
        return

    package_logger = _package_logger()
    package_logger.handlers.clear()
    package_logger.setLevel(level)

    target = handler if handler is not None else logging.StreamHandler(sys.stdout)
    target.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package_logger.addHandler(target)
    # pytest's caplog listens on the Python root logger
    package_logger.propagate = True

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger that defers to the ``netimpact`` level.

    Args:
        name: Usually the caller's ``__name__``.
    """
    setup_root_logger()
    module_logger = logging.getLogger(name)
    module_logger.setLevel(logging.NOTSET)
    return module_logger


def set_global_log_level(level: int) -> None:
    """Change the level of the package logger and its handlers."""
    setup_root_logger()
    package_logger = _package_logger()
    package_logger.setLevel(level)
    for installed in package_logger.handlers:
        installed.setLevel(level)


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    set_global_log_level(logging.INFO)


def export_log_level() -> str:
    """Publish the effective package level in ``NETIMPACT_LOG_LEVEL``.

    Child processes started afterwards inherit the variable.

    Returns:
        The exported level name.
    """
    name = logging.getLevelName(_package_logger().getEffectiveLevel())
    os.environ[LOG_LEVEL_ENV] = name
    return name


def apply_env_log_level() -> Optional[int]:
    """Apply the level named by ``NETIMPACT_LOG_LEVEL``, if set.

    Unknown names fall back to INFO.

    Returns:
        The applied numeric level, or None when the variable is unset.
    """
    name = os.getenv(LOG_LEVEL_ENV)
    if not name:
        return None
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        level = logging.INFO
    set_global_log_level(level)
    return level


def reset_logging() -> None:
    """Drop the package handler and level (used by tests)."""
    global _configured
    _configured = False
    package_logger = _package_logger()
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


setup_root_logger()
