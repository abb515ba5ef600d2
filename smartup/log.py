"""Logging setup for SmartUp."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "smartup"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(
    verbose: bool = False,
    log_level: str | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Attach a rich handler to the ``smartup`` logger.

    Calling this again replaces the handler installed by a previous call.

    Args:
        verbose: Log at DEBUG instead of the default WARNING
        log_level: Explicit level name, overrides ``verbose``
        console: Console to log to; defaults to stderr

    Returns:
        The configured logger
    """
    if log_level:
        level = _LEVELS.get(log_level.lower(), logging.WARNING)
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_smartup_handler", False):
            logger.removeHandler(handler)
            handler.close()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler._smartup_handler = True
    logger.addHandler(handler)
    logger.propagate = False
    return logger
