from __future__ import annotations

import asyncio
import functools
import json
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec

from agentdeck.core.console import get_logger
from agentdeck.core.result import (
    AgentDeckError,
    ConfigurationError,
    SessionError,
    TaskNotFoundError,
    VersionControlError,
)

logger = get_logger("agentdeck.mcp")

P = ParamSpec("P")
ToolAsyncCallable = Callable[P, Awaitable[str]]

_ERROR_KINDS: tuple[tuple[type[AgentDeckError], str], ...] = (
    (VersionControlError, "VersionControlError"),
    (ConfigurationError, "ConfigurationError"),
    (SessionError, "SessionError"),
)


def to_json(payload: Any) -> str:
    return json.dumps(payload)


def _format_error(error_code: str, message: str, **extra: Any) -> str:
    payload: dict[str, Any] = {"error": error_code, "message": message, **extra}
    return json.dumps(payload)


def _error_kind(exc: AgentDeckError) -> str:
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(exc, exc_type):
            return kind
    return "AgentDeckError"


def tool_error_handler(fn: ToolAsyncCallable[P]) -> ToolAsyncCallable[P]:
    """Decorate a tool to provide consistent error handling.

    Domain errors become ``{"error": kind, "message": text}`` with the message
    passed through verbatim so the GUI can display it. Anything unexpected is
    logged with its traceback.
    """

    @functools.wraps(fn)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> str:
        try:
            return await fn(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except TaskNotFoundError as exc:
            return _format_error("TaskNotFound", exc.message, task_id=exc.task_id)
        except AgentDeckError as exc:
            logger.warning("Tool %s failed: %s", fn.__name__, exc)
            return _format_error(_error_kind(exc), exc.message)
        except ValueError as exc:
            return _format_error("InvalidArgument", str(exc))
        except Exception as exc:
            logger.exception("Unhandled error in tool %s", fn.__name__)
            return _format_error("UnexpectedError", f"Unexpected error: {exc}")

    return wrapper


__all__ = ["logger", "to_json", "tool_error_handler"]
