"""Git worktree provider for task isolation.

Each task runs in its own worktree at ``<repo_root>/<dir_name>/<branch_name>``
so that agents working on different tasks never share an index or a working
directory.

Policy, stated once here and applied by the methods below:
    - Worktree existence is authoritative. Failing to add or remove a
      worktree raises VersionControlError.
    - Branches are disposable. Creating the branch before ``worktree add`` and
      deleting it after ``worktree remove`` are best-effort: failures are
      logged and ignored (the branch may already exist, or may be left
      dangling, both recoverable).
    - Removal is forced. Dirty worktrees are discarded.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from agentdeck.core.console import get_logger
from agentdeck.core.result import Err, Ok, VersionControlError, best_effort
from agentdeck.git.client import AsyncRepo

logger = get_logger(__name__)

DEFAULT_WORKTREE_DIR = ".worktrees"


@dataclass(frozen=True)
class WorktreeInfo:
    """A materialized worktree and the branch it has checked out."""

    path: Path
    branch: str


@runtime_checkable
class VersionControlWorktreeProvider(Protocol):
    """Creates and removes isolated working directories bound to branches."""

    async def create_worktree(self, repo_root: Path, branch_name: str) -> WorktreeInfo: ...

    async def remove_worktree(
        self, repo_root: Path, branch_name: str, delete_branch: bool
    ) -> None: ...


def worktree_path_for(
    repo_root: Path | str, branch_name: str, dir_name: str = DEFAULT_WORKTREE_DIR
) -> Path:
    """Return the deterministic worktree location for a branch."""
    return Path(repo_root) / dir_name / branch_name


def _link_shared_dirs(repo_root: Path, worktree_path: Path, symlink_dirs: Sequence[str]) -> None:
    for rel in symlink_dirs:
        source = repo_root / rel
        target = worktree_path / rel
        if not source.is_dir():
            logger.debug("Skipping symlink for %s: not a directory in %s", rel, repo_root)
            continue
        if target.exists() or target.is_symlink():
            continue
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(source, target, target_is_directory=True)
        except OSError as exc:
            logger.warning("Failed to symlink %s into %s: %s", rel, worktree_path, exc)


class GitWorktreeProvider:
    """Worktree provider backed by the git CLI.

    Attributes:
        dir_name: Directory under the repo root that holds worktrees
        symlink_dirs: Repo-relative directories linked into new worktrees
            (typically gitignored dependency folders such as node_modules)
    """

    def __init__(
        self,
        dir_name: str = DEFAULT_WORKTREE_DIR,
        symlink_dirs: Sequence[str] = (),
    ) -> None:
        self._dir_name = dir_name
        self._symlink_dirs = tuple(symlink_dirs)

    async def create_worktree(self, repo_root: Path, branch_name: str) -> WorktreeInfo:
        """Ensure ``branch_name`` exists and check it out in a fresh worktree.

        Branch creation is best-effort; ``worktree add`` is not.

        Raises:
            VersionControlError: If git could not add the worktree.
        """
        repo = AsyncRepo(Path(repo_root))
        path = worktree_path_for(repo_root, branch_name, self._dir_name)

        best_effort(await repo.create_branch(branch_name), logger, f"branch create {branch_name}")

        match await repo.worktree_add(path, branch_name):
            case Err(err):
                raise VersionControlError(
                    f"Failed to create worktree: {err.message}", context=err.context
                )
            case Ok(_):
                pass

        if self._symlink_dirs:
            await asyncio.to_thread(_link_shared_dirs, Path(repo_root), path, self._symlink_dirs)

        logger.info("Created worktree %s on branch %s", path, branch_name)
        return WorktreeInfo(path=path, branch=branch_name)

    async def remove_worktree(
        self, repo_root: Path, branch_name: str, delete_branch: bool
    ) -> None:
        """Force-remove the worktree for ``branch_name``.

        When ``delete_branch`` is set, the branch is force-deleted afterwards
        on a best-effort basis.

        Raises:
            VersionControlError: If git could not remove the worktree.
        """
        repo = AsyncRepo(Path(repo_root))
        path = worktree_path_for(repo_root, branch_name, self._dir_name)

        match await repo.worktree_remove(path, force=True):
            case Err(err):
                raise VersionControlError(
                    f"Failed to remove worktree: {err.message}", context=err.context
                )
            case Ok(_):
                pass

        if delete_branch:
            best_effort(
                await repo.delete_branch(branch_name, force=True),
                logger,
                f"branch delete {branch_name}",
            )

        logger.info("Removed worktree %s", path)


__all__ = [
    "DEFAULT_WORKTREE_DIR",
    "GitWorktreeProvider",
    "VersionControlWorktreeProvider",
    "WorktreeInfo",
    "worktree_path_for",
]
