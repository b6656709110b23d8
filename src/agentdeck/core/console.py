"""Rich consoles and logging for agentdeck.

Under ``agentdeck serve`` stdout carries the MCP stdio stream, so every log
record goes to ``stderr_console``. ``console`` is only for CLI tables.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

APP_LOGGER = "agentdeck"

# Libraries that log every request at INFO; quiet unless --verbose.
CHATTY_LOGGERS: tuple[str, ...] = ("mcp", "httpx", "asyncio")

console = Console()
stderr_console = Console(stderr=True)


def _level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | int = logging.INFO, verbose: bool = False) -> logging.Logger:
    """Route all logging through one RichHandler on stderr.

    ``verbose`` forces DEBUG, including git command lines, and leaves the
    chatty third-party loggers alone. Returns the ``agentdeck`` logger.
    """
    threshold = logging.DEBUG if verbose else _level_number(level)

    handler = RichHandler(
        console=stderr_console,
        # Git stderr and task names may contain square brackets.
        markup=False,
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(threshold)

    if not verbose:
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(max(threshold, logging.WARNING))

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(threshold)
    return app_logger


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or APP_LOGGER)
