"""Logging utilities for graphbuild commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "graphbuild"

VERBOSITY_LEVELS = {
    "info": logging.INFO,
    "verbose": logging.DEBUG,
    "debug": logging.DEBUG,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the graphbuild hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def resolve_level(verbosity: str | None) -> int:
    """Map a CLI verbosity name onto a logging level."""
    if not verbosity:
        return logging.INFO
    try:
        return VERBOSITY_LEVELS[verbosity.strip().lower()]
    except KeyError:
        choices = ", ".join(VERBOSITY_LEVELS)
        raise ValueError(f"Unknown verbosity '{verbosity}' (expected one of: {choices})") from None


def configure_logging(
    *, verbosity: str | None = "info", log_file: Path | None = None
) -> logging.Logger:
    """Configure the graphbuild logger with console output and optional file sink."""
    level = resolve_level(verbosity)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if verbosity == "debug":
        console_format = "[graphbuild] %(levelname)s %(name)s: %(message)s"
    else:
        console_format = "[graphbuild] %(levelname)s %(message)s"
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(console_format))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["VERBOSITY_LEVELS", "configure_logging", "get_logger", "resolve_level"]
