"""Logging setup for the Chat Vault service."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stream handler to the package logger.

    Calling this more than once only updates the level.
    """
    logger = logging.getLogger("chat_vault")
    logger.setLevel(level.upper())
    if not any(getattr(h, "_chat_vault", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._chat_vault = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
