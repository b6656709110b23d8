"""MCP server implementation using FastMCP.

Creates and configures the MCP server with:
    - Configuration loading
    - One AppState / TaskLifecycleManager for the life of the process
    - Tool registration
    - Agent cleanup on shutdown
"""

from __future__ import annotations

import asyncio
import inspect

from mcp.server.fastmcp import FastMCP

from agentdeck.core.config import AppConfig, load_config
from agentdeck.core.state import AppState
from agentdeck.mcp import logger
from agentdeck.mcp.tools import build_tools
from agentdeck.tasks import TaskLifecycleManager


def _load_configuration() -> AppConfig:
    cfg, meta = load_config()
    if meta.error:
        logger.error("Invalid config at %s, using defaults: %s", meta.path, meta.error)
    else:
        logger.info("MCP server loaded config from %s", meta.path)
    return cfg


def register_tools(mcp: FastMCP, manager: TaskLifecycleManager) -> None:
    """Register every task lifecycle tool with the MCP server."""
    tools = build_tools(manager)

    for tool_name, func in tools.items():
        signature = inspect.signature(func)
        for param_name, param in signature.parameters.items():
            if param.annotation is inspect.Parameter.empty:
                raise RuntimeError(
                    f"MCP tool '{tool_name}' argument '{param_name}' is missing a type hint."
                )
        mcp.add_tool(func, name=tool_name)

    logger.info("Registered %d MCP tools", len(tools))


def create_server(
    config: AppConfig | None = None,
) -> tuple[FastMCP, TaskLifecycleManager]:
    cfg = config or _load_configuration()
    manager = TaskLifecycleManager(AppState.create(cfg))
    server = FastMCP("agentdeck")
    register_tools(server, manager)
    return server, manager


def main(config: AppConfig | None = None) -> None:
    server, manager = create_server(config)
    try:
        server.run()
    finally:
        killed = asyncio.run(manager.kill_all_sessions())
        if killed:
            logger.info("Killed %d agent sessions on shutdown", killed)


if __name__ == "__main__":
    main()
