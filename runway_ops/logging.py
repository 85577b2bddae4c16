# runway_ops/logging.py
"""
Structured logging for the runway operations core.

Each log line is a JSON object with consistent fields:
- timestamp: ISO 8601 (UTC)
- level: DEBUG/INFO/WARNING/ERROR/CRITICAL
- logger: Module name
- message: Event name
- **kwargs: Additional structured fields

Usage:
    from runway_ops.logging import get_logger
    logger = get_logger(__name__)
    logger.info("runway_status_changed", previous="OPEN", current="CAUTION")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter: one object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "structured_data"):
            log_data.update(record.structured_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.ERROR:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class StructuredLogger:
    """
    Wrapper around a stdlib logger that takes structured keyword fields.

    Example:
        logger = get_logger(__name__)
        logger.warning("weather_fetch_failed", consecutive_failures=3)
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs):
        self._logger.log(level, message, exc_info=exc_info, extra={"structured_data": kwargs})

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log at ERROR level with the active traceback attached."""
        self._log(logging.ERROR, message, exc_info=True, **kwargs)


_configured = False


def configure_logging(level: str = "INFO", json_output: bool = True):
    """
    Configure root logging once per process.

    Args:
        level: Log level name
        json_output: JSON lines (True) or plain text (False)
    """
    global _configured
    if _configured:
        return
    _configured = True

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    if json_output:
        console_handler.setFormatter(StructuredLogFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    for noisy in ("httpx", "httpcore", "uvicorn", "sqlalchemy"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger, configuring logging from settings on first use.

    Args:
        name: Logger name (typically __name__)
    """
    if not _configured:
        from .settings import settings
        configure_logging(level=settings.log_level, json_output=settings.log_json)
    return StructuredLogger(name)


def get_ingestion_logger(source: str) -> StructuredLogger:
    """Get logger for a weather ingestion source."""
    return get_logger(f"runway_ops.ingestion.{source}")


def get_api_logger() -> StructuredLogger:
    """Get logger for API routes."""
    return get_logger("runway_ops.api")
