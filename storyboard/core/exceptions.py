"""
Exception hierarchy for the storyboard batch engine.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Creation-time errors (SubjectNotFoundError, NoWorkRemainingError,
ProviderUnavailableError) surface to the caller. Item-time errors
(ChunkMissingError, ProviderError subclasses) are recorded on the job item
and never escape the processing loop. PersistenceFailureError makes the
loop back off until the next tick.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class StoryboardException(Exception):
    """Base exception for all storyboard application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class SubjectNotFoundError(StoryboardException):
    """Raised when a script cannot be found."""

    def __init__(self, script_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize script not found error.

        Args:
            script_id: ID of the missing script
            details: Additional context
        """
        details = details or {}
        details["script_id"] = script_id
        super().__init__(f"Script not found: {script_id}", details)


class NoWorkRemainingError(StoryboardException):
    """Raised when every chunk of a script already has an image."""

    def __init__(self, script_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["script_id"] = script_id
        super().__init__("All chunks already have images", details)


class ProviderUnavailableError(StoryboardException):
    """Raised when a requested image provider is unknown or not configured."""

    def __init__(
        self,
        provider: str,
        available: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider unavailable error.

        Args:
            provider: Provider key that was requested
            available: Provider keys that are currently usable
            details: Additional context
        """
        details = details or {}
        details["provider"] = provider
        if available is not None:
            details["available"] = available
        super().__init__(f"Image provider unavailable: {provider}", details)


class ChunkMissingError(StoryboardException):
    """Raised when a chunk referenced by a job no longer exists in its script."""

    def __init__(
        self,
        chunk_id: str,
        script_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["chunk_id"] = chunk_id
        if script_id:
            details["script_id"] = script_id
        super().__init__(f"Chunk {chunk_id} not found in script", details)


class ProviderError(StoryboardException):
    """Base exception for image provider errors."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            provider: Provider that failed
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details)


class ProviderFailureError(ProviderError):
    """Raised when a provider backend reports a failed generation."""

    pass


class ProviderTimeoutError(ProviderError):
    """Raised when a provider does not finish within its polling or time budget."""

    pass


class PersistenceFailureError(StoryboardException):
    """Raised when the job or script store cannot be read or written."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize persistence failure.

        Args:
            message: Error message
            operation: Store operation that failed
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
