"""
Error handling utilities for storyboard routes.

Maps the domain exception hierarchy onto HTTP status codes in one place
and provides a decorator so endpoints stay free of try/except blocks.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from storyboard.core.exceptions import (
    ChunkMissingError,
    NoWorkRemainingError,
    PersistenceFailureError,
    ProviderError,
    ProviderUnavailableError,
    StoryboardException,
    SubjectNotFoundError,
)
from storyboard.models.common import ErrorResponse

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])

_STATUS_BY_EXCEPTION: list[tuple[type[StoryboardException], int]] = [
    (SubjectNotFoundError, status.HTTP_404_NOT_FOUND),
    (ChunkMissingError, status.HTTP_404_NOT_FOUND),
    (NoWorkRemainingError, status.HTTP_409_CONFLICT),
    (ProviderUnavailableError, status.HTTP_400_BAD_REQUEST),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
    (PersistenceFailureError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_code_for(exc: StoryboardException) -> int:
    """Return the HTTP status for a domain exception (500 when unmapped)."""
    for exc_type, status_code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def handle_storyboard_errors(func: F) -> F:
    """
    Decorator to transform storyboard exceptions into HTTPExceptions.

    This centralizes:
    - Logging of errors with their details
    - Mapping specific exceptions to HTTP status codes
    - Ensuring uniform error response formats
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except StoryboardException as e:
            status_code = status_code_for(e)
            log = logger.error if status_code >= 500 else logger.warning
            log(
                f"{func.__name__} failed with {type(e).__name__}",
                extra={"error": e.message, "details": e.details, "status_code": status_code},
            )
            raise HTTPException(
                status_code=status_code,
                detail=ErrorResponse(
                    error=e.message,
                    error_type=type(e).__name__,
                    details=e.details or None,
                ).model_dump(),
            )

    return wrapper  # type: ignore
