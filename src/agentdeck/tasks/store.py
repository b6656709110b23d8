"""In-memory task registry.

Readers get snapshot copies, never the live record, so a mutation can not
race with a read in flight. Writers mutate through ``update``, which holds
the store lock for the mutation's duration.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TypeVar

from agentdeck.core.result import TaskNotFoundError

from .models import Task

T = TypeVar("T")


class TaskStore:
    """Thread-safe map of task id to Task."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = threading.Lock()

    def insert(self, task: Task) -> None:
        """Store a copy of ``task``.

        Raises:
            ValueError: If a task with the same id is already present.
        """
        with self._lock:
            if task.id in self._tasks:
                raise ValueError(f"Task {task.id} already exists")
            self._tasks[task.id] = task.snapshot()

    def remove(self, task_id: str) -> Task | None:
        """Remove a task and return its final state, or None if absent."""
        with self._lock:
            return self._tasks.pop(task_id, None)

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.snapshot() if task is not None else None

    def list(self) -> list[Task]:
        """Point-in-time copies of every task, in no particular order."""
        with self._lock:
            return [task.snapshot() for task in self._tasks.values()]

    def update(self, task_id: str, mutator: Callable[[Task], None]) -> Task:
        """Apply ``mutator`` to the live record under the lock.

        Returns:
            A snapshot of the task after mutation.

        Raises:
            TaskNotFoundError: If no task has this id.
        """
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            mutator(task)
            return task.snapshot()

    def update_all(self, mutator: Callable[[list[Task]], T]) -> T:
        """Apply ``mutator`` to every live record in one critical section.

        Returns whatever ``mutator`` returns. Any other lock the mutator takes
        must come after this one in the documented lock order.
        """
        with self._lock:
            return mutator(list(self._tasks.values()))

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._tasks

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)


__all__ = ["TaskStore"]
