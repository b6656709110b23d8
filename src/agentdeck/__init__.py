"""agentdeck - run coding-agent CLIs side by side, one git worktree per task.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
