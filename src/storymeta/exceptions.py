"""Exception hierarchy for storymeta.

All errors raised by the extraction pipeline inherit from
StorymetaException. Most of them are recoverable and are caught and logged
at the level they occur (one file, one story, one port); only ConfigError
is expected to reach the top-level caller.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StorymetaException(Exception):
    """Base exception for all storymeta errors.

    Attributes:
        message: Human-readable error message
        error_code: Optional error code for programmatic handling
        context: Additional context information
    """

    def __init__(
        self, message: str, error_code: str | None = None, context: dict[str, Any] | None = None
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message
            error_code: Optional error code
            context: Optional context dictionary
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ConfigError(StorymetaException):
    """Raised when extraction configuration is invalid or incomplete."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code="CONFIG", context=context)


class SourceParseError(StorymetaException):
    """Raised when a story source file cannot be parsed."""

    def __init__(self, path: Path | str | None, reason: str) -> None:
        self.path = Path(path) if path is not None else None
        self.reason = reason
        location = str(self.path) if self.path is not None else "<source>"
        super().__init__(
            f"Could not parse {location}: {reason}",
            error_code="PARSE",
            context={"path": location},
        )


class DependencyUnavailableError(StorymetaException):
    """Raised when an optional dependency needed by a strategy is missing."""

    def __init__(self, capability: str, packages: list[str]) -> None:
        self.capability = capability
        self.packages = packages
        super().__init__(
            f"Capability '{capability}' requires: {', '.join(packages)}",
            error_code="DEPENDENCY",
            context={"capability": capability},
        )


class StoryIndexError(StorymetaException):
    """Raised when a story index cannot be fetched, read, or validated."""

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        super().__init__(message, error_code="INDEX", context={"source": source})


class IntrospectionError(StorymetaException):
    """Raised when the browser cannot introspect a story."""

    def __init__(self, message: str, story_id: str | None = None) -> None:
        self.story_id = story_id
        super().__init__(message, error_code="INTROSPECTION", context={"story_id": story_id})


class ExtractionTimeoutError(StorymetaException):
    """Raised when an extraction operation exceeds its time limit."""

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"{operation} timed out after {timeout_seconds}s",
            error_code="TIMEOUT",
            context={"operation": operation},
        )


async def with_timeout(
    coro: Any,
    timeout_seconds: float | None,
    operation_name: str = "operation",
) -> Any:
    """
    Execute a coroutine with a timeout.

    Args:
        coro: Coroutine to execute.
        timeout_seconds: Timeout in seconds, or None for no limit.
        operation_name: Name for error messages.

    Returns:
        Result of the coroutine.

    Raises:
        ExtractionTimeoutError: If the operation times out.
    """
    if timeout_seconds is None:
        return await coro
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except TimeoutError:
        logger.debug(f"{operation_name} exceeded {timeout_seconds}s")
        raise ExtractionTimeoutError(operation_name, timeout_seconds) from None
