from __future__ import annotations

import asyncio
from pathlib import Path

from agentdeck.core.console import get_logger
from agentdeck.core.result import Err, Ok, Result, VersionControlError

logger = get_logger(__name__)


async def _run_git(cwd: Path, *args: str) -> Result[str, VersionControlError]:
    """Run git with asyncio and return stdout as text, wrapping failures."""
    if not cwd.exists():
        return Err(
            VersionControlError("Repository path does not exist", context={"cwd": str(cwd)})
        )

    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        process = await asyncio.create_subprocess_exec(
            "git",
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            stdin=asyncio.subprocess.DEVNULL,
            cwd=cwd,
        )
    except FileNotFoundError:
        return Err(
            VersionControlError("git executable not found on PATH", context={"cwd": str(cwd)})
        )
    except OSError as exc:
        return Err(
            VersionControlError(
                f"Failed to start git: {exc}",
                context={"cwd": str(cwd), "args": list(args)},
            )
        )

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        stdout_text = stdout.decode("utf-8", errors="replace").strip()
        detail = message or stdout_text or f"git {' '.join(args)} failed"
        return Err(
            VersionControlError(
                detail,
                context={"cwd": str(cwd), "args": list(args), "returncode": process.returncode},
            )
        )

    return Ok(stdout.decode("utf-8", errors="replace"))


class AsyncRepo:
    """Async git wrapper built on subprocess plumbing.

    Every command runs with the working directory set to ``root``. The root is
    not validated up front; a missing or non-repository root surfaces as an
    ``Err`` from the first command.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    async def run_git(self, *args: str) -> Result[str, VersionControlError]:
        """Public wrapper around git subprocess execution."""
        return await _run_git(self._root, *args)

    # -------------------------------------------------------------------------
    # Branch operations
    # -------------------------------------------------------------------------

    async def create_branch(self, branch: str) -> Result[None, VersionControlError]:
        """Create a local branch at HEAD without checking it out."""
        result = await _run_git(self._root, "branch", branch)
        return result.map(lambda _: None)

    async def delete_branch(
        self,
        branch: str,
        *,
        force: bool = False,
    ) -> Result[None, VersionControlError]:
        """Delete a local branch."""
        flag = "-D" if force else "-d"
        result = await _run_git(self._root, "branch", flag, branch)
        return result.map(lambda _: None)

    # -------------------------------------------------------------------------
    # Worktree operations
    # -------------------------------------------------------------------------

    async def worktree_add(
        self,
        path: Path,
        branch: str,
    ) -> Result[Path, VersionControlError]:
        """Create a new worktree checked out at ``branch``.

        Args:
            path: Directory for the new worktree
            branch: Existing branch to check out

        Returns:
            Ok(worktree_path) on success, Err(VersionControlError) on failure
        """
        match await _run_git(self._root, "worktree", "add", str(path), branch):
            case Ok(_):
                return Ok(path)
            case Err(err):
                return Err(err)

    async def worktree_remove(
        self,
        path: Path,
        *,
        force: bool = False,
    ) -> Result[None, VersionControlError]:
        """Remove a worktree.

        Args:
            path: Worktree directory to remove
            force: If True, remove even if dirty
        """
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        args.append(str(path))

        result = await _run_git(self._root, *args)
        return result.map(lambda _: None)


__all__ = ["AsyncRepo"]
