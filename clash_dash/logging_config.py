"""
Logging configuration for clash_dash.

Sets up the loguru sinks once at startup. Every message passes through the
log sanitizer so router session tokens and passwords never reach a sink.
"""

import sys
from typing import Optional

from loguru import logger

from .config import get_cli_log_file_path, get_cli_setting
from .Utils.log_sanitizer import sanitize_record


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None, console: Optional[bool] = None):
    """
    Configure logging settings for the application.

    Arguments left as None are read from the [general] config section.
    """
    level = level or get_cli_setting("general", "log_level", "INFO")
    sink = log_file or str(get_cli_log_file_path())
    if console is None:
        console = get_cli_setting("general", "log_console", True)

    logger.remove()  # Remove default handler
    logger.configure(patcher=sanitize_record)
    logger.add(
        sink=sink,
        level=level,
        rotation="10 MB",
        retention="7 days",
        compression="zip"
    )

    if console:
        logger.add(
            sink=sys.stderr,
            level=level,
            colorize=True
        )

    logger.info(f"Logging configured: level={level}, file={sink}, console={console}")
