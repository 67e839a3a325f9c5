"""Logging setup for the PackTrack app.

Application loggers live under ``packtrack.*``: the core logs at debug level
only, the repository logs writes at info. The requested level applies to
those loggers; everything else stays at WARNING.
"""

import logging
import sys

APP_LOGGER = "packtrack"

# Chatty at INFO even when the app is not.
_QUIET_LOGGERS = ("uvicorn.access", "uvicorn.error", "watchfiles", "nicegui", "engineio", "socketio")


def configure_logging(level: str = "INFO") -> None:
    """Configures the root handler and the ``packtrack`` logger level."""
    numeric_level = getattr(logging, str(level).upper(), None)
    invalid = not isinstance(numeric_level, int)
    if invalid:
        numeric_level = logging.INFO

    # e.g. "2026-10-19 06:02:11 [INFO] packtrack.data.repository: Saved shift entry 12 (3 orders, 198.00 T)"
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    # Remove existing handlers to avoid duplicates during reloads
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.addHandler(handler)

    logging.getLogger(APP_LOGGER).setLevel(numeric_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if invalid:
        logging.getLogger(__name__).warning("Invalid log level %r, defaulting to INFO", level)
