"""Structured logging configuration for prepbake."""

import logging
import sys
from typing import Optional

try:
    from json_log_formatter import JSONFormatter
except ImportError:
    JSONFormatter = None  # type: ignore


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    pipeline_name: Optional[str] = None,
) -> None:
    """Configure logging for prepbake.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, use JSON format; otherwise use normal format
        pipeline_name: Optional pipeline name attached to every record
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("prepbake")
    logger.setLevel(log_level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if json_format:
        if JSONFormatter is None:
            raise ImportError(
                "json-log-formatter is required for JSON logging. "
                "Install it with: pip install json-log-formatter"
            )
        formatter = JSONFormatter()
    else:
        formatter = StructuredFormatter()

    handler.setFormatter(formatter)
    if pipeline_name:
        handler.addFilter(PipelineNameFilter(pipeline_name))
    logger.addHandler(handler)


class PipelineNameFilter(logging.Filter):
    """Attaches the pipeline name to records that don't carry one."""

    def __init__(self, pipeline_name: str):
        super().__init__()
        self.pipeline_name = pipeline_name

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "pipeline_name"):
            record.pipeline_name = self.pipeline_name
        return True


class StructuredFormatter(logging.Formatter):
    """Structured formatter that adds context to log messages."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with context."""
        context = getattr(record, "context", {})

        parts = [f"[{record.levelname}]"]

        if hasattr(record, "pipeline_name"):
            parts.append(f"pipeline={record.pipeline_name}")

        for key, value in context.items():
            parts.append(f"{key}={value}")

        parts.append(record.getMessage())

        message = " ".join(parts)
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message
