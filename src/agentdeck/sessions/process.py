"""psutil-backed agent sessions.

The PTY layer that spawns agent CLIs hands us a pid; ``PidSession`` adapts it
to the ProcessSession protocol so the task manager can terminate the whole
process tree (agent CLIs routinely spawn language servers and shells).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

import psutil

from agentdeck.core.console import get_logger
from agentdeck.core.result import Err, Ok, Result, SessionError

logger = get_logger(__name__)


@dataclass
class PidSession:
    """Tracks an agent process by pid.

    Attributes:
        pid: OS process id of the agent CLI
        agent_id: Catalog id of the agent definition that was launched
        kill_timeout: Seconds to wait after SIGTERM before SIGKILL
        id: Session identifier (random when not supplied)
    """

    pid: int
    agent_id: str = ""
    kill_timeout: float = 3.0
    id: str = field(default_factory=lambda: uuid4().hex)

    def is_running(self) -> bool:
        try:
            proc = psutil.Process(self.pid)
            return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False

    def kill(self) -> Result[None, SessionError]:
        """Terminate the process and its children, escalating to SIGKILL.

        An already-exited process counts as killed.
        """
        try:
            root = psutil.Process(self.pid)
            procs = [*root.children(recursive=True), root]
        except psutil.NoSuchProcess:
            logger.debug("Session %s (pid %s) already exited", self.id, self.pid)
            return Ok(None)
        except psutil.AccessDenied:
            return Err(
                SessionError(
                    "Permission denied to inspect process",
                    context={"session": self.id, "pid": self.pid},
                )
            )

        denied: list[int] = []
        for proc in procs:
            self._signal(proc, "terminate", denied)

        _, alive = psutil.wait_procs(procs, timeout=self.kill_timeout)
        for proc in alive:
            self._signal(proc, "kill", denied)

        still_alive: list[psutil.Process] = []
        if alive:
            _, still_alive = psutil.wait_procs(alive, timeout=self.kill_timeout)

        if denied:
            return Err(
                SessionError(
                    "Permission denied to kill process",
                    context={"session": self.id, "pids": denied},
                )
            )
        if still_alive:
            return Err(
                SessionError(
                    "Process did not exit after SIGKILL",
                    context={"session": self.id, "pids": [p.pid for p in still_alive]},
                )
            )

        logger.info("Killed session %s (pid %s)", self.id, self.pid)
        return Ok(None)

    @staticmethod
    def _signal(
        proc: psutil.Process,
        action: str,
        denied: list[int],
    ) -> None:
        # Denied pids are collected; the rest of the tree is still signalled.
        try:
            getattr(proc, action)()
        except psutil.NoSuchProcess:
            return
        except psutil.AccessDenied:
            if proc.pid not in denied:
                denied.append(proc.pid)


__all__ = ["PidSession"]
