"""
Correlation IDs for log lines.

An HTTP request is tagged with its X-Correlation-ID (or a fresh UUID);
the job loop tags everything it logs while working a job with
``job-<job_id>`` so a whole batch can be grepped out of the output.

Dependencies: contextvars
System role: Request and job tracing
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind correlation_id (or a new UUID) to the current context and return it."""
    value = correlation_id or str(uuid.uuid4())
    correlation_id_ctx.set(value)
    return value


def get_correlation_id() -> str:
    return correlation_id_ctx.get()


def clear_correlation_id() -> None:
    correlation_id_ctx.set("")


@contextmanager
def job_correlation(job_id: uuid.UUID | str) -> Iterator[str]:
    """
    Tag log records with a job for the duration of the block.

    The previous value is restored on exit, so a job processed inside a
    request context does not wipe the request's ID.

    Yields:
        str: The bound ID, ``job-<job_id>``
    """
    token = correlation_id_ctx.set(f"job-{job_id}")
    try:
        yield correlation_id_ctx.get()
    finally:
        correlation_id_ctx.reset(token)
