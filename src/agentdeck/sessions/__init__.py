"""Agent session tracking.

    - ProcessSession: Protocol for a killable agent process handle
    - SessionRegistry: Thread-safe id -> handle map
    - PidSession: psutil-backed handle that kills a process tree
"""

from __future__ import annotations

from .process import PidSession
from .registry import ProcessSession, SessionRegistry

__all__ = ["PidSession", "ProcessSession", "SessionRegistry"]
