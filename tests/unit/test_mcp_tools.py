"""
Unit tests for the task lifecycle MCP tools.

Tools are exercised directly through build_tools with an in-memory worktree
provider, checking the JSON payloads the GUI receives for both success and
error paths.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from agentdeck.core.config import AppConfig
from agentdeck.core.state import AppState
from agentdeck.mcp import tool_error_handler
from agentdeck.mcp.server import create_server
from agentdeck.mcp.tools import ToolFn, build_tools
from agentdeck.tasks import TaskLifecycleManager
from tests.mocks.fake_backends import FakeSession, FakeWorktreeProvider

EXPECTED_TOOLS = {
    "list_agents",
    "set_project_root",
    "create_task",
    "delete_task",
    "list_tasks",
    "get_task",
    "attach_agent_process",
    "detach_agent_process",
    "kill_all_agents",
    "count_running_agents",
}


@pytest.fixture
def provider() -> FakeWorktreeProvider:
    return FakeWorktreeProvider()


@pytest.fixture
def manager(provider: FakeWorktreeProvider) -> TaskLifecycleManager:
    return TaskLifecycleManager(AppState(), provider)


@pytest.fixture
def tools(manager: TaskLifecycleManager) -> dict[str, ToolFn]:
    return build_tools(manager)


async def _call(tools: dict[str, ToolFn], name: str, /, **kwargs: Any) -> Any:
    return json.loads(await tools[name](**kwargs))


class TestTaskTools:
    @pytest.mark.asyncio
    async def test_create_list_delete(self, tools: dict[str, ToolFn]) -> None:
        root = await _call(tools, "set_project_root", path="/repo")
        assert root == {"project_root": "/repo"}

        created = await _call(tools, "create_task", name="Fix Login Bug")
        assert created["branch_name"] == "task/fix-login-bug"
        assert created["worktree_path"] == "/repo/.worktrees/task/fix-login-bug"

        listed = await _call(tools, "list_tasks")
        assert [t["id"] for t in listed] == [created["id"]]
        assert listed[0]["status"] == "active"

        fetched = await _call(tools, "get_task", task_id=created["id"])
        assert fetched["name"] == "Fix Login Bug"

        deleted = await _call(tools, "delete_task", task_id=created["id"])
        assert deleted == {"deleted": created["id"]}
        assert await _call(tools, "list_tasks") == []

    @pytest.mark.asyncio
    async def test_create_without_project_root(self, tools: dict[str, ToolFn]) -> None:
        payload = await _call(tools, "create_task", name="Anything")
        assert payload == {"error": "ConfigurationError", "message": "No project root set"}

    @pytest.mark.asyncio
    async def test_unknown_task(self, tools: dict[str, ToolFn]) -> None:
        payload = await _call(tools, "delete_task", task_id="missing")
        assert payload == {
            "error": "TaskNotFound",
            "message": "Task not found: missing",
            "task_id": "missing",
        }

    @pytest.mark.asyncio
    async def test_version_control_message_passes_through(
        self, tools: dict[str, ToolFn], provider: FakeWorktreeProvider
    ) -> None:
        await _call(tools, "set_project_root", path="/repo")
        provider.fail_create = "fatal: 'task/x' is already checked out"

        payload = await _call(tools, "create_task", name="x")

        assert payload["error"] == "VersionControlError"
        assert payload["message"] == (
            "Failed to create worktree: fatal: 'task/x' is already checked out"
        )
        assert await _call(tools, "list_tasks") == []


class TestSessionTools:
    @pytest.mark.asyncio
    async def test_attach_detach(
        self, tools: dict[str, ToolFn], manager: TaskLifecycleManager
    ) -> None:
        await _call(tools, "set_project_root", path="/repo")
        created = await _call(tools, "create_task", name="Sessions")

        attached = await _call(
            tools, "attach_agent_process", task_id=created["id"], pid=999999, agent_id="codex"
        )
        session_id = attached["session_id"]
        assert attached["task"]["agent_ids"] == [session_id]
        assert await _call(tools, "count_running_agents") == {"running": 1}

        detached = await _call(
            tools,
            "detach_agent_process",
            task_id=created["id"],
            session_id=session_id,
            kill=False,
        )
        assert detached["agent_ids"] == []
        assert manager.running_session_count() == 0

    @pytest.mark.asyncio
    async def test_attach_unknown_agent(self, tools: dict[str, ToolFn]) -> None:
        await _call(tools, "set_project_root", path="/repo")
        created = await _call(tools, "create_task", name="Agents")

        payload = await _call(
            tools, "attach_agent_process", task_id=created["id"], pid=1, agent_id="nope"
        )

        assert payload == {"error": "InvalidArgument", "message": "Unknown agent: nope"}

    @pytest.mark.asyncio
    async def test_kill_all_agents(
        self, tools: dict[str, ToolFn], manager: TaskLifecycleManager
    ) -> None:
        await _call(tools, "set_project_root", path="/repo")
        created = await _call(tools, "create_task", name="Kill All")
        sessions = [FakeSession("a"), FakeSession("b")]
        for session in sessions:
            manager.attach_session(created["id"], session)

        assert await _call(tools, "kill_all_agents") == {"killed": 2}
        assert all(s.kill_calls == 1 for s in sessions)
        assert (await _call(tools, "get_task", task_id=created["id"]))["agent_ids"] == []

    @pytest.mark.asyncio
    async def test_list_agents(self, tools: dict[str, ToolFn]) -> None:
        agents = await _call(tools, "list_agents")
        assert [a["id"] for a in agents] == ["claude-code", "codex", "gemini", "opencode"]


class TestErrorHandler:
    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported(self) -> None:
        @tool_error_handler
        async def broken() -> str:
            raise RuntimeError("boom")

        payload = json.loads(await broken())
        assert payload == {"error": "UnexpectedError", "message": "Unexpected error: boom"}

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        @tool_error_handler
        async def cancelled() -> str:
            raise asyncio.CancelledError

        with pytest.raises(asyncio.CancelledError):
            await cancelled()


class TestServer:
    def test_build_tools_names(self, tools: dict[str, ToolFn]) -> None:
        assert set(tools) == EXPECTED_TOOLS

    @pytest.mark.asyncio
    async def test_create_server_registers_tools(self, tmp_path: Path) -> None:
        server, manager = create_server(AppConfig(project_root=tmp_path))

        registered = {tool.name for tool in await server.list_tools()}

        assert registered == EXPECTED_TOOLS
        assert manager.project_root() == tmp_path
