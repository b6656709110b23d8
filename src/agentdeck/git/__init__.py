"""Git operations and worktree management.

This package provides:
    - AsyncRepo: Non-blocking git commands (branches, worktrees)
    - GitWorktreeProvider: Task worktree creation and forced removal
    - VersionControlWorktreeProvider: The protocol the task manager depends on
"""

from __future__ import annotations

from .client import AsyncRepo
from .worktree import (
    DEFAULT_WORKTREE_DIR,
    GitWorktreeProvider,
    VersionControlWorktreeProvider,
    WorktreeInfo,
    worktree_path_for,
)

__all__ = [
    "DEFAULT_WORKTREE_DIR",
    "AsyncRepo",
    "GitWorktreeProvider",
    "VersionControlWorktreeProvider",
    "WorktreeInfo",
    "worktree_path_for",
]
