"""Static catalog of supported agent CLIs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class AgentDef:
    """How to launch one agent CLI.

    ``resume_args`` continue the agent's previous conversation;
    ``skip_permissions_args`` start it without interactive approval prompts.
    """

    id: str
    name: str
    command: str
    description: str
    args: tuple[str, ...] = ()
    resume_args: tuple[str, ...] = ()
    skip_permissions_args: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("args", "resume_args", "skip_permissions_args"):
            data[key] = list(data[key])
        return data


DEFAULT_AGENTS: tuple[AgentDef, ...] = (
    AgentDef(
        id="claude-code",
        name="Claude Code",
        command="claude",
        resume_args=("--continue",),
        skip_permissions_args=("--dangerously-skip-permissions",),
        description="Anthropic's Claude Code CLI agent",
    ),
    AgentDef(
        id="codex",
        name="Codex CLI",
        command="codex",
        resume_args=("resume", "--last"),
        skip_permissions_args=("--full-auto",),
        description="OpenAI's Codex CLI agent",
    ),
    AgentDef(
        id="gemini",
        name="Gemini CLI",
        command="gemini",
        resume_args=("--resume", "latest"),
        skip_permissions_args=("--yolo",),
        description="Google's Gemini CLI agent",
    ),
    AgentDef(
        id="opencode",
        name="OpenCode",
        command="opencode",
        description="Open source AI coding agent (opencode.ai)",
    ),
)


@dataclass(frozen=True)
class AgentCatalog:
    """Read-only list of agent definitions, fixed at startup."""

    agents: tuple[AgentDef, ...] = field(default=DEFAULT_AGENTS)

    @classmethod
    def from_defs(cls, agents: Iterable[AgentDef]) -> AgentCatalog:
        return cls(agents=tuple(agents))

    def list(self) -> list[AgentDef]:
        return list(self.agents)

    def get(self, agent_id: str) -> AgentDef | None:
        return next((a for a in self.agents if a.id == agent_id), None)


__all__ = ["DEFAULT_AGENTS", "AgentCatalog", "AgentDef"]
