"""
Logging helpers for prompts, provider payloads and item errors.

Chunk texts and scene descriptions can run to paragraphs, and generated
images arrive as raw bytes; these helpers keep such values to one short
token in a log line or an item's error column.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import enum
import logging
from typing import Any

TRUNCATION_MARK = "... (truncated, {total} total)"


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + TRUNCATION_MARK.format(total=len(text))


def safe_log_value(value: Any, max_length: int = 200) -> str:
    """
    Render value for a log line without dumping its contents.

    Containers and image bytes are reduced to their size; strings and
    everything else are cut at max_length. Never raises.
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, enum.Enum):
            return _truncate(str(value.value), max_length)
        if isinstance(value, (bytes, bytearray)):
            return f"bytes({len(value)})"
        if isinstance(value, (list, tuple)):
            return f"{type(value).__name__}({len(value)} items)"
        if isinstance(value, dict):
            return f"dict({len(value)} keys)"
        return _truncate(value if isinstance(value, str) else str(value), max_length)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"


def error_summary(exc: BaseException, max_length: int = 500) -> str:
    """
    One-line description of an unexpected exception for a job item.

    Returns:
        str: The exception message, or its class name when the message is empty
    """
    return safe_log_value(str(exc) or type(exc).__name__, max_length=max_length)


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """
    Log exc with traceback; context values go through safe_log_value.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        **context: Extra fields such as job_id or chunk_id
    """
    extra = {key: safe_log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = error_summary(exc, max_length=1000)
    logger.error(message, exc_info=exc, extra=extra)
