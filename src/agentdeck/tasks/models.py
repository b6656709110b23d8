from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any


class TaskStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class Task:
    """A unit of work: one branch/worktree plus the agent sessions working in it."""

    id: str
    name: str
    branch_name: str
    worktree_path: Path
    agent_ids: list[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.ACTIVE

    def snapshot(self) -> Task:
        """Return a copy that shares no mutable state with this record."""
        return replace(self, agent_ids=list(self.agent_ids))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "branch_name": self.branch_name,
            "worktree_path": str(self.worktree_path),
            "agent_ids": list(self.agent_ids),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class CreateTaskResult:
    id: str
    branch_name: str
    worktree_path: Path

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "branch_name": self.branch_name,
            "worktree_path": str(self.worktree_path),
        }


__all__ = ["CreateTaskResult", "Task", "TaskStatus"]
