"""Progress reporting for long-running build steps."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator


def step(logger: logging.Logger, subject: str, text: str | None = None) -> None:
    """Log an intermediate progress line such as ``Write bindings: out/A.ts``."""
    if text:
        logger.info("  %s %s", subject, text)
    else:
        logger.info("  %s", subject)


@contextmanager
def with_step(logger: logging.Logger, text: str, error_text: str) -> Iterator[logging.Logger]:
    """Log ``text`` on success or ``error_text: <reason>`` when the block raises."""
    logger.debug("%s...", text)
    try:
        yield logger
    except Exception as exc:
        logger.error("%s: %s", error_text, exc)
        raise
    logger.info("%s", text)


__all__ = ["step", "with_step"]
