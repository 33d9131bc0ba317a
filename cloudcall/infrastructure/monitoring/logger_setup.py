"""Centralized logging configuration for the cloudcall application.

Sets up standard Python logging with appropriate levels, formatters,
and handlers (console, optional file), and optionally turns on the
boto3/botocore wire-level loggers.
"""

import logging
import sys
from typing import Optional

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = None
SDK_LOGGERS = ("boto3", "botocore")


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = DEFAULT_LOG_FILE,
    sdk_debug: bool = False,
) -> None:
    """Configures the root logger for the application.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG, logging.INFO).
        log_format: The format string for log messages.
        log_file: Optional path to a file for logging output.
        sdk_debug: Route boto3/botocore debug logs through the same handlers.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if sdk_debug else log_level)

    # Remove existing handlers attached to the root logger
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if sdk_debug else log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")
        except OSError as e:
            logging.error(f"Failed to set up file logging to {log_file}: {e}", exc_info=True)

    # The SDKs are chatty at DEBUG; keep them quiet unless asked for
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if sdk_debug else logging.WARNING)

    logging.debug(f"Logging configured. Level={logging.getLevelName(log_level)}, sdk_debug={sdk_debug}")
