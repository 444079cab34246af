"""Logging helpers for gatewaymetrics.

The library logs through the standard ``logging`` module under the
``gatewaymetrics`` logger hierarchy and never installs handlers itself;
the hosting gateway decides where records go.
"""

import logging

LOGGER_NAME = "gatewaymetrics"

logger = logging.getLogger(LOGGER_NAME)


def get_logger(name: str) -> logging.Logger:
    """Return a child logger of the package logger.

    Args:
        name: Module name, usually ``__name__``.

    Returns:
        Logger nested under ``gatewaymetrics``.
    """
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logger.getChild(name)


def log_exception(message: str, *args: object) -> None:
    """Log the exception currently being handled at ERROR level.

    Must be called from inside an ``except`` block so the traceback is
    attached to the record.

    Args:
        message: Log message, %-style formatted with ``args``.
        *args: Arguments for the message.
    """
    logger.error(message, *args, exc_info=True)
