"""Tasks: a branch/worktree plus the agent sessions working in it.

    - Task, TaskStatus, CreateTaskResult: records returned to callers
    - TaskStore: Thread-safe in-memory registry
    - TaskLifecycleManager: create/delete/list with cascading cleanup
    - slug, build_branch_name: branch naming
"""

from __future__ import annotations

from .manager import TaskLifecycleManager
from .models import CreateTaskResult, Task, TaskStatus
from .naming import build_branch_name, sanitize_branch_prefix, slug
from .store import TaskStore

__all__ = [
    "CreateTaskResult",
    "Task",
    "TaskLifecycleManager",
    "TaskStatus",
    "TaskStore",
    "build_branch_name",
    "sanitize_branch_prefix",
    "slug",
]
