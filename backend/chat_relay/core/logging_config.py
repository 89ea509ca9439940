"""Logging setup for the relay process."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Install a single stream handler on the package logger.

    Calling this more than once only updates the level.

    Args:
        level: Logging level name (DEBUG, INFO, ...)
    """
    logger = logging.getLogger("chat_relay")
    logger.setLevel(level.upper())

    if not any(getattr(h, "_chat_relay", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._chat_relay = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
