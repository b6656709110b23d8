"""MCP tools exposing the task lifecycle to the GUI.

Tools are closures over one TaskLifecycleManager, so every request served by
a server shares the same in-memory state.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from agentdeck.sessions import PidSession
from agentdeck.tasks import TaskLifecycleManager

from . import to_json, tool_error_handler

ToolFn = Callable[..., Awaitable[str]]


def build_tools(manager: TaskLifecycleManager) -> dict[str, ToolFn]:
    """Return the tool functions for ``manager`` keyed by tool name."""
    kill_timeout = manager.state.config.sessions.kill_timeout

    @tool_error_handler
    async def list_agents() -> str:
        """List the agent CLIs that can be launched in a task."""
        return to_json([agent.to_dict() for agent in manager.list_agents()])

    @tool_error_handler
    async def set_project_root(path: str) -> str:
        """Set the git repository that new tasks branch from."""
        manager.set_project_root(path)
        return to_json({"project_root": str(manager.project_root())})

    @tool_error_handler
    async def create_task(name: str) -> str:
        """Create a task: a new branch checked out in its own worktree.

        Returns {"id", "branch_name", "worktree_path"}.
        """
        result = await manager.create_task(name)
        return to_json(result.to_dict())

    @tool_error_handler
    async def delete_task(task_id: str, delete_branch: bool = False) -> str:
        """Kill a task's agents, remove its worktree and optionally its branch."""
        await manager.delete_task(task_id, delete_branch)
        return to_json({"deleted": task_id})

    @tool_error_handler
    async def list_tasks() -> str:
        """List every task with its branch, worktree path and attached agents."""
        return to_json([task.to_dict() for task in manager.list_tasks()])

    @tool_error_handler
    async def get_task(task_id: str) -> str:
        """Return one task."""
        return to_json(manager.get_task(task_id).to_dict())

    @tool_error_handler
    async def attach_agent_process(task_id: str, pid: int, agent_id: str = "") -> str:
        """Track a spawned agent process (by pid) as a session of a task.

        Returns {"session_id", "task"}.
        """
        if agent_id and manager.state.agents.get(agent_id) is None:
            raise ValueError(f"Unknown agent: {agent_id}")
        session = PidSession(pid=pid, agent_id=agent_id, kill_timeout=kill_timeout)
        task = manager.attach_session(task_id, session)
        return to_json({"session_id": session.id, "task": task.to_dict()})

    @tool_error_handler
    async def detach_agent_process(task_id: str, session_id: str, kill: bool = True) -> str:
        """Stop tracking a session, killing its process unless kill is false."""
        task = await manager.detach_session(task_id, session_id, kill=kill)
        return to_json(task.to_dict())

    @tool_error_handler
    async def kill_all_agents() -> str:
        """Kill every tracked agent process."""
        return to_json({"killed": await manager.kill_all_sessions()})

    @tool_error_handler
    async def count_running_agents() -> str:
        """Number of agent sessions currently tracked."""
        return to_json({"running": manager.running_session_count()})

    tools: list[ToolFn] = [
        list_agents,
        set_project_root,
        create_task,
        delete_task,
        list_tasks,
        get_task,
        attach_agent_process,
        detach_agent_process,
        kill_all_agents,
        count_running_agents,
    ]
    return {fn.__name__: fn for fn in tools}


__all__ = ["build_tools"]
