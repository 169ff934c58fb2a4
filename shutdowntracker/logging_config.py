"""Logging configuration for the shutdown tracker."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> None:
    """Configure application-wide logging.

    Logs to stderr, and additionally to a file when TRACKER_LOG_FILE is set,
    with timestamp, level, module name, and message. Cycle events carry a
    ``cycle_id=`` key so a single cycle can be grepped out of the stream.

    Args:
        level: Level name overriding TRACKER_LOG_LEVEL

    Environment Variables:
        TRACKER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO).
                           DEBUG adds per-attempt probe events and confidence
                           term breakdowns.
        TRACKER_LOG_FILE: Optional path of an appended log file.

    Examples:
        # One event per cycle
        $ python -m shutdowntracker

        # Full per-probe tracing
        $ TRACKER_LOG_LEVEL=DEBUG python -m shutdowntracker
    """
    level_name = (level or os.environ.get("TRACKER_LOG_LEVEL", "INFO")).upper()
    log_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_file = os.environ.get("TRACKER_LOG_FILE", "").strip()
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured: level=%s, file=%s",
        logging.getLevelName(log_level),
        log_file or "(none)",
    )
