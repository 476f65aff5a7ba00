"""
ColorMatch Structured Logging
All service logs go through loguru with their context fields bound as extras.
"""
import sys
from typing import Any, Dict, Optional

from loguru import logger

from colormatch.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"


class StructuredLogger:
    """Thin facade over loguru that takes context as a dict of extras."""

    def __init__(self, level: Optional[str] = None, serialize: Optional[bool] = None):
        self.level = (level or config.LOG_LEVEL).upper()
        self.serialize = config.LOG_JSON if serialize is None else serialize
        self._configure_sink()

    def _configure_sink(self):
        # One stdout sink; loguru's default stderr handler is dropped
        logger.remove()
        logger.add(sys.stdout, format=LOG_FORMAT, level=self.level, serialize=self.serialize)

    def log(self, level: str, message: str, extra: Optional[Dict[str, Any]] = None):
        """Emit ``message`` at ``level`` with ``extra`` bound to the record."""
        target = logger.bind(**extra) if extra else logger
        # depth=2 attributes the record to the caller, not this facade
        target.opt(depth=2).log(level, message)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("ERROR", message, extra)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("DEBUG", message, extra)


_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Return the process-wide logger, configuring the sink on first use."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
