"""Thread-safe registry of live agent sessions.

The registry only tracks handles. Removing a session never terminates it:
callers extract the handle with ``remove`` (or ``drain``), and kill it after
the registry lock has been released, so a hung child process cannot block
unrelated registry operations.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from agentdeck.core.result import Result, SessionError


@runtime_checkable
class ProcessSession(Protocol):
    """A live agent process the core can track and terminate.

    ``kill`` may be called more than once; killing an already-dead process
    returns ``Ok``. Failures are reported through the returned ``Result``,
    never raised.
    """

    @property
    def id(self) -> str: ...

    def kill(self) -> Result[None, SessionError]: ...


class SessionRegistry:
    """Maps session id to ProcessSession under a single lock."""

    def __init__(self) -> None:
        self._sessions: dict[str, ProcessSession] = {}
        self._lock = threading.Lock()

    def insert(self, session: ProcessSession) -> ProcessSession | None:
        """Register ``session`` under its id.

        Returns:
            The handle previously registered under the same id, if any.
        """
        with self._lock:
            previous = self._sessions.get(session.id)
            self._sessions[session.id] = session
            return previous

    def remove(self, session_id: str) -> ProcessSession | None:
        """Atomically look up and unregister a session.

        Safe to call with an unknown id: returns None without side effects.
        """
        with self._lock:
            return self._sessions.pop(session_id, None)

    def get(self, session_id: str) -> ProcessSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def drain(self) -> list[ProcessSession]:
        """Unregister every session and return the handles."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            return sessions

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["ProcessSession", "SessionRegistry"]
