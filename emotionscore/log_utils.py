##########################################################################
#                                                                        #
#  This file (log_utils.py) holds the logging setup shared by the        #
#  EmotionScore services.                                                #
#                                                                        #
##########################################################################

from __future__ import annotations

import logging
from typing import Any

from emotionscore.runtime_settings import get_runtime_setting


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)"


# Create a custom formatter sub class for adding colored outputs
class CustomFormatter(logging.Formatter):
    """Creates a custom formatter for the logging library."""
    grey = "\x1b[38;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"

    FORMATS = {
        logging.DEBUG: grey + LOG_FORMAT + reset,
        logging.INFO: grey + LOG_FORMAT + reset,
        logging.WARNING: yellow + LOG_FORMAT + reset,
        logging.ERROR: red + LOG_FORMAT + reset,
        logging.CRITICAL: bold_red + LOG_FORMAT + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def _resolve_level(level: Any) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level or "INFO").strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Any = "INFO", colored: bool = True) -> logging.Logger:
    """Install a single stream handler on the package logger."""
    package_logger = logging.getLogger("emotionscore")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(CustomFormatter() if colored else logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(_resolve_level(level))
    package_logger.propagate = False

    # Keep the ollama transport chatter out of the service logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return package_logger


def configure_logging_from_settings(settings: dict[str, Any]) -> logging.Logger | None:
    """Apply the ``logging`` section of the runtime settings.

    Returns None and leaves the host application's handlers alone when
    ``logging.enabled`` is false."""
    if not get_runtime_setting(settings, "logging.enabled", True):
        return None
    return configure_logging(
        level=get_runtime_setting(settings, "logging.level", "INFO"),
        colored=bool(get_runtime_setting(settings, "logging.colored", True)),
    )
