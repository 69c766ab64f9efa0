"""Logging setup for the embedgen build and its CLI.

Every pipeline stage logs under ``embedgen.<component>`` (``graph``,
``cache``, ``inliner``, ``minify``, ``emit``, ``diagnostics``). Console
output carries the component only in verbose mode, where per-file cache and
include decisions are logged at DEBUG.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "embedgen"

_CONSOLE_FORMAT = "[embedgen] %(levelname)s %(message)s"
_VERBOSE_CONSOLE_FORMAT = "[embedgen:%(component)s] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(component)s: %(message)s"


class _ComponentFilter(logging.Filter):
    """Adds ``record.component``: the logger name below ``embedgen``."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(_LOGGER_NAME + "."):
            record.component = name[len(_LOGGER_NAME) + 1 :]
        else:
            record.component = "build"
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger under the embedgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def resolve_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Console level for the CLI flags; ``verbose`` wins over ``quiet``."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler and, when requested, a DEBUG file sink."""
    console_level = resolve_level(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    component_filter = _ComponentFilter()
    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.addFilter(component_filter)
    console.setFormatter(
        logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT)
    )
    logger.addHandler(console)

    logger_level = console_level
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(component_filter)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
        logger_level = logging.DEBUG

    logger.setLevel(logger_level)
    return logger


__all__ = ["configure_logging", "get_logger", "resolve_level"]
