"""
Result types and error hierarchy for agentdeck.

This module provides:
1. Result[T, E] type for explicit error handling at the git/process seams
2. The domain exception hierarchy surfaced to callers
3. ``best_effort`` for sub-steps whose failure is tolerated by contract

Usage:
    from agentdeck.core.result import Ok, Err, Result, VersionControlError

    def add_worktree() -> Result[Path, VersionControlError]:
        if failed:
            return Err(VersionControlError("Failed to create worktree: ..."))
        return Ok(path)

    path = add_worktree().unwrap()  # raises the contained error on Err
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply a function to the contained value."""
        return Ok(fn(self.value))


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the contained error."""
        raise self.error

    def map(self, fn: Callable[[Any], Any]) -> Err[E]:
        """No-op for Err - returns self unchanged."""
        return self


# Type alias for Result
Result = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Domain-specific error hierarchy
# ---------------------------------------------------------------------------


class AgentDeckError(Exception):
    """Base exception for all agentdeck errors.

    ``message`` is the text shown to the user; ``context`` carries structured
    details for logs and is appended by ``__str__``.
    """

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class VersionControlError(AgentDeckError):
    """Raised when a worktree or branch operation fails.

    The message carries git's diagnostic text verbatim.
    """


class TaskNotFoundError(AgentDeckError):
    """Raised when an operation references an unknown task id."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}", context={"task_id": task_id})
        self.task_id = task_id


class ConfigurationError(AgentDeckError):
    """Raised when an operation needs configuration that is missing.

    Examples:
    - No project root set before creating or deleting a task
    """


class SessionError(AgentDeckError):
    """Raised (or returned in an Err) when an agent process cannot be killed."""


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def best_effort(result: Result[T, E], logger: logging.Logger, step: str) -> T | None:
    """Discard the error of a sub-step whose failure is tolerated.

    Used where the lifecycle contract says "ignore and continue": branch
    creation before ``worktree add``, branch deletion after a successful
    ``worktree remove``, and killing agent processes during cleanup. The
    failure is logged at WARNING and ``None`` is returned in its place.
    """
    match result:
        case Ok(value):
            return value
        case Err(error):
            logger.warning("Ignoring failed %s: %s", step, error)
            return None


__all__ = [
    # Result types
    "Ok",
    "Err",
    "Result",
    # Error hierarchy
    "AgentDeckError",
    "VersionControlError",
    "TaskNotFoundError",
    "ConfigurationError",
    "SessionError",
    # Helpers
    "best_effort",
]
