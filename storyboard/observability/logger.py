"""
Logging setup for the API process.

Everything goes to stdout with the correlation ID in brackets, so a batch
can be followed from the POST that created it through every item the job
loop processed (``[job-<id>]``).

Dependencies: logging (stdlib), storyboard.observability.correlation
System role: Centralized logging configuration
"""

import logging
import sys

from storyboard.observability.correlation import get_correlation_id

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

# Client libraries that log every HTTP round trip to the providers and S3;
# uvicorn.access duplicates RequestLoggingMiddleware
QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "openai",
    "google_genai",
    "botocore",
    "boto3",
    "sqlalchemy.engine",
    "uvicorn.access",
)


class CorrelationIdFilter(logging.Filter):
    """Stamp records with the active correlation ID ("-" outside a request or job)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Replace root handlers with a single stdout handler.

    Safe to call more than once (the lifespan calls it on every startup).

    Args:
        level: Root level name or number; unknown names fall back to INFO
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    root_logger.addHandler(handler)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
