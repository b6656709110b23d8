"""Task lifecycle orchestration.

Ties the worktree provider, the task store and the session registry together
and keeps them consistent:

    - create_task never leaves a task visible without its worktree.
    - delete_task kills every attached session, removes the worktree, and only
      then drops the task. If worktree removal fails, the task stays (with its
      now-dead session ids) so the delete can be retried.

Worktree subprocesses and kill calls always run with no lock held.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

from agentdeck.agents import AgentDef
from agentdeck.core.console import get_logger
from agentdeck.core.result import (
    ConfigurationError,
    SessionError,
    TaskNotFoundError,
    VersionControlError,
    best_effort,
)
from agentdeck.git.worktree import GitWorktreeProvider, VersionControlWorktreeProvider
from agentdeck.sessions import ProcessSession

from .models import CreateTaskResult, Task, TaskStatus
from .naming import build_branch_name

if TYPE_CHECKING:
    from agentdeck.core.state import AppState

logger = get_logger(__name__)


class TaskLifecycleManager:
    """Create, delete and list tasks against a shared AppState.

    Args:
        state: Process-wide state shared with every other caller
        provider: Worktree backend (default: git CLI configured from state.config)
        branch_prefix: Overrides ``state.config.worktrees.branch_prefix``
    """

    def __init__(
        self,
        state: AppState,
        provider: VersionControlWorktreeProvider | None = None,
        *,
        branch_prefix: str | None = None,
    ) -> None:
        worktree_cfg = state.config.worktrees
        self._state = state
        self._provider = provider or GitWorktreeProvider(
            dir_name=worktree_cfg.dir_name,
            symlink_dirs=worktree_cfg.symlink_dirs,
        )
        self._branch_prefix = branch_prefix or worktree_cfg.branch_prefix

    @property
    def state(self) -> AppState:
        return self._state

    # -------------------------------------------------------------------------
    # Project root
    # -------------------------------------------------------------------------

    def set_project_root(self, path: Path | str) -> None:
        """Replace the project root. Validity is checked by the first git call."""
        root = Path(path).expanduser()
        self._state.project_root.set(root)
        logger.info("Project root set to %s", root)

    def project_root(self) -> Path | None:
        return self._state.project_root.get()

    def _require_project_root(self) -> Path:
        root = self._state.project_root.get()
        if root is None:
            raise ConfigurationError("No project root set")
        return root

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def create_task(self, name: str) -> CreateTaskResult:
        """Create a branch and worktree for ``name`` and register a task for it.

        Raises:
            ConfigurationError: If no project root is set.
            VersionControlError: If the worktree could not be created. No task
                is registered in that case.
        """
        root = self._require_project_root()
        branch_name = build_branch_name(name, self._branch_prefix)

        worktree = await self._provider.create_worktree(root, branch_name)

        task = Task(
            id=str(uuid4()),
            name=name,
            branch_name=worktree.branch,
            worktree_path=worktree.path,
        )
        try:
            self._state.tasks.insert(task)
        except ValueError:
            await self._rollback_worktree(root, worktree.branch)
            raise

        logger.info("Created task %s (%s) at %s", task.id, task.branch_name, task.worktree_path)
        return CreateTaskResult(
            id=task.id,
            branch_name=task.branch_name,
            worktree_path=task.worktree_path,
        )

    async def _rollback_worktree(self, root: Path, branch_name: str) -> None:
        try:
            await self._provider.remove_worktree(root, branch_name, False)
        except VersionControlError as exc:
            logger.error("Rollback left an orphaned worktree for %s: %s", branch_name, exc)

    async def delete_task(self, task_id: str, delete_branch: bool = False) -> None:
        """Kill the task's sessions, remove its worktree, then forget the task.

        Raises:
            TaskNotFoundError: If no task has this id. Nothing is touched.
            ConfigurationError: If no project root is set.
            VersionControlError: If the worktree could not be removed. The task
                stays registered so the delete can be retried. Not raised when an
                overlapping delete of the same task already removed it.
        """
        task = self._state.tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        root = self._require_project_root()

        await self._terminate_sessions(task.agent_ids)
        try:
            await self._provider.remove_worktree(root, task.branch_name, delete_branch)
        except VersionControlError:
            if task_id not in self._state.tasks:
                # An overlapping delete of the same task finished first.
                logger.info("Task %s was deleted concurrently", task_id)
                return
            raise

        removed = self._state.tasks.remove(task_id)
        if removed is not None:
            removed.status = TaskStatus.CLOSED
            # Sessions attached while the cascade was running.
            late = [sid for sid in removed.agent_ids if sid not in task.agent_ids]
            if late:
                await self._terminate_sessions(late)

        logger.info("Deleted task %s (%s)", task_id, task.branch_name)

    def list_tasks(self) -> list[Task]:
        return self._state.tasks.list()

    def get_task(self, task_id: str) -> Task:
        task = self._state.tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def attach_session(self, task_id: str, session: ProcessSession) -> Task:
        """Register ``session`` and record it on the task.

        Both happen under the task store lock, so a concurrent delete either
        sees the session (and kills it) or this call fails.

        Raises:
            TaskNotFoundError: If no task has this id. The session is not
                registered.
            SessionError: If a different session already uses this id.
        """
        registry = self._state.sessions

        def _attach(task: Task) -> None:
            existing = registry.get(session.id)
            if existing is not None and existing is not session:
                raise SessionError(
                    "Session id already registered", context={"session": session.id}
                )
            registry.insert(session)
            if session.id not in task.agent_ids:
                task.agent_ids.append(session.id)

        task = self._state.tasks.update(task_id, _attach)
        logger.info("Attached session %s to task %s", session.id, task_id)
        return task

    async def detach_session(self, task_id: str, session_id: str, kill: bool = True) -> Task:
        """Drop ``session_id`` from the task and the registry, killing it if asked.

        Raises:
            TaskNotFoundError: If no task has this id.
        """

        def _detach(task: Task) -> None:
            if session_id in task.agent_ids:
                task.agent_ids.remove(session_id)

        task = self._state.tasks.update(task_id, _detach)
        session = self._state.sessions.remove(session_id)
        if kill and session is not None:
            await self._kill(session)
        logger.info("Detached session %s from task %s", session_id, task_id)
        return task

    async def kill_all_sessions(self) -> int:
        """Kill every registered session and clear every task's agent ids.

        Returns:
            Number of sessions that were killed successfully.
        """
        registry = self._state.sessions

        def _clear_and_drain(tasks: list[Task]) -> list[ProcessSession]:
            for task in tasks:
                task.agent_ids.clear()
            return registry.drain()

        # Lock order: TaskStore -> SessionRegistry.
        sessions = self._state.tasks.update_all(_clear_and_drain)
        results = await asyncio.gather(*(self._kill(s) for s in sessions))
        killed = sum(results)
        logger.info("Killed %d of %d sessions", killed, len(sessions))
        return killed

    def running_session_count(self) -> int:
        return len(self._state.sessions)

    def list_agents(self) -> list[AgentDef]:
        return self._state.agents.list()

    async def _terminate_sessions(self, session_ids: Iterable[str]) -> int:
        sessions: list[ProcessSession] = []
        for session_id in session_ids:
            session = self._state.sessions.remove(session_id)
            if session is None:
                logger.debug("Session %s already gone", session_id)
                continue
            sessions.append(session)
        results = await asyncio.gather(*(self._kill(s) for s in sessions))
        return sum(results)

    @staticmethod
    async def _kill(session: ProcessSession) -> bool:
        """Kill one session off the event loop; failures are logged and ignored."""
        result = await asyncio.to_thread(session.kill)
        best_effort(result, logger, f"kill of session {session.id}")
        return result.is_ok()


__all__ = ["TaskLifecycleManager"]
