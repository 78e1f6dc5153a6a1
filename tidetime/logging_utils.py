"""Logging setup for tidetime.

Records go to Google Cloud logging when running on Cloud Run and to stderr
otherwise. Application messages carry a "[location][component]" prefix added
by the caller (see BaseApiClient.log), so the handlers only add the level and
source position.
"""

import logging
import os
from typing import Union

import google.cloud.logging  # type: ignore[import]

# Cloud Run sets this for every service revision
CLOUD_RUN_ENV = "K_SERVICE"

# Directory containing the tidetime package; source paths are logged relative to it
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

LOCAL_FORMAT = "%(asctime)s %(levelname)s:%(relativepath)s:%(lineno)d: %(message)s"

# Library loggers that are only useful when debugging
CHATTY_LOGGERS = ("asyncio", "urllib3", "google.auth")


def parse_level(level: Union[int, str]) -> int:
    """Resolve a level given as a number or a name such as "debug".

    Raises:
        ValueError: If the name is not a standard logging level
    """
    if isinstance(level, int):
        return level
    levels = logging.getLevelNamesMapping()
    try:
        return levels[level.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


class RelativePathFilter(logging.Filter):
    """Adds a "relativepath" attribute: the source file relative to the project."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            record.relativepath = os.path.relpath(
                os.path.normpath(record.pathname), PROJECT_ROOT
            )
        except ValueError:
            # Different drive on Windows
            record.relativepath = record.pathname
        return True


def _configure_local_handler(root_logger: logging.Logger) -> None:
    """Replace the root handlers with a single stderr handler."""
    root_logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOCAL_FORMAT))
    # Root logger filters do not run for records propagated from child loggers
    handler.addFilter(RelativePathFilter())
    root_logger.addHandler(handler)


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure the root logger for Cloud Run or local execution.

    Args:
        level: Root level, as a number or a level name

    Raises:
        ValueError: If level is an unknown level name
    """
    resolved = parse_level(level)
    root_logger = logging.getLogger()
    if not any(isinstance(f, RelativePathFilter) for f in root_logger.filters):
        root_logger.addFilter(RelativePathFilter())
    root_logger.setLevel(resolved)

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))

    if CLOUD_RUN_ENV in os.environ:
        log_client = google.cloud.logging.Client()  # type: ignore[no-untyped-call]
        log_client.setup_logging(log_level=resolved)  # type: ignore[no-untyped-call]
        logging.info("Using google cloud logging")
    else:
        _configure_local_handler(root_logger)
    logging.info(f"Log level {logging.getLevelName(resolved)}")
