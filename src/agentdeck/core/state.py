"""Process-wide application state.

One ``AppState`` is constructed at startup and passed by reference to the
task manager and the transports. Each container guards itself with its own
lock; there is no global lock. When one lock is taken while another is held,
the order is always TaskStore -> project_root -> SessionRegistry.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path

from agentdeck.agents import AgentCatalog
from agentdeck.core.config import AppConfig
from agentdeck.sessions import SessionRegistry
from agentdeck.tasks.store import TaskStore


class ProjectRoot:
    """Lock-guarded, replaceable path to the repository tasks are created in."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._lock = threading.Lock()

    def get(self) -> Path | None:
        with self._lock:
            return self._path

    def set(self, path: Path | None) -> None:
        with self._lock:
            self._path = path


@dataclass
class AppState:
    config: AppConfig = field(default_factory=AppConfig)
    tasks: TaskStore = field(default_factory=TaskStore)
    sessions: SessionRegistry = field(default_factory=SessionRegistry)
    agents: AgentCatalog = field(default_factory=AgentCatalog)
    project_root: ProjectRoot = field(default_factory=ProjectRoot)

    @classmethod
    def create(cls, config: AppConfig) -> AppState:
        """Build fresh state, seeding the project root from configuration."""
        return cls(config=config, project_root=ProjectRoot(config.project_root))


__all__ = ["AppState", "ProjectRoot"]
