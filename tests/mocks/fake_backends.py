"""Fake collaborators for task lifecycle tests.

Provides in-memory implementations of the VersionControlWorktreeProvider and
ProcessSession protocols so the manager can be exercised without git or real
processes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

from agentdeck.core.result import Err, Ok, Result, SessionError, VersionControlError
from agentdeck.git import WorktreeInfo, worktree_path_for


class FakeWorktreeProvider:
    """Records calls and returns canned success or failure.

    Usage:
        provider = FakeWorktreeProvider()
        provider.fail_remove = "fatal: worktree is locked"
    """

    def __init__(self) -> None:
        self.created: list[tuple[Path, str]] = []
        self.removed: list[tuple[Path, str, bool]] = []
        self.fail_create: str | None = None
        self.fail_remove: str | None = None
        self.delay: float = 0.0
        self.on_remove: Callable[[], Awaitable[None]] | None = None

    async def create_worktree(self, repo_root: Path, branch_name: str) -> WorktreeInfo:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_create is not None:
            raise VersionControlError(f"Failed to create worktree: {self.fail_create}")
        self.created.append((repo_root, branch_name))
        return WorktreeInfo(path=worktree_path_for(repo_root, branch_name), branch=branch_name)

    async def remove_worktree(
        self, repo_root: Path, branch_name: str, delete_branch: bool
    ) -> None:
        if self.on_remove is not None:
            await self.on_remove()
        if self.fail_remove is not None:
            raise VersionControlError(f"Failed to remove worktree: {self.fail_remove}")
        self.removed.append((repo_root, branch_name, delete_branch))


class FakeSession:
    """ProcessSession whose kill outcome is scripted."""

    def __init__(self, session_id: str, *, fail: bool = False) -> None:
        self._id = session_id
        self.fail = fail
        self.kill_calls = 0

    @property
    def id(self) -> str:
        return self._id

    def kill(self) -> Result[None, SessionError]:
        self.kill_calls += 1
        if self.fail:
            return Err(SessionError("Permission denied to kill process"))
        return Ok(None)
