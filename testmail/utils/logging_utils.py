"""
Logging setup for the testmail package
"""

import logging
import sys
from typing import Optional, TextIO

from testmail.utils.structured_logging import JSONFormatter

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
PACKAGE_LOGGER = "testmail"


def setup_logging(level: str = "INFO", structured: bool = False,
                  stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a single stream handler to the package logger

    Args:
        level: Log level name; unknown names fall back to INFO
        structured: Emit JSON lines instead of the plain text format
        stream: Target stream (default: stdout)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    level_name = str(level).upper()
    resolved_level = logging.getLevelName(level_name)
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter() if structured else logging.Formatter(LOG_FORMAT))

    # Re-running setup replaces the previous handler instead of duplicating output
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(resolved_level)

    if resolved_level == logging.INFO and level_name != "INFO":
        logger.warning("Invalid log level '%s'; defaulting to INFO", level)

    return logger
