"""Logger setup for the odysis package."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int | str = logging.INFO, log_file: str | Path | None = None) -> None:
    """Send records from the 'odysis' logger to stdout and optionally a file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Logging level, e.g. logging.DEBUG or "DEBUG"
        log_file: Optional path of a log file, overwritten on each run
    """
    logger = logging.getLogger("odysis")
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized at %s", logging.getLevelName(logger.level))
