from __future__ import annotations

from .catalog import DEFAULT_AGENTS, AgentCatalog, AgentDef

__all__ = ["DEFAULT_AGENTS", "AgentCatalog", "AgentDef"]
