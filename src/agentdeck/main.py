from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import typer
from rich import box
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .agents import AgentCatalog
from .core.config import AppConfig, ConfigLoadResult, load_config
from .core.console import console, setup_logging, stderr_console

app = typer.Typer(help="agentdeck: run coding agents side by side, one git worktree per task.")


@dataclass
class CliState:
    config: AppConfig
    config_meta: ConfigLoadResult
    logger: logging.Logger


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to an agentdeck config file (TOML or JSON)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    # load_config never raises; a broken file yields defaults + meta.error
    loaded_config, meta = load_config(config_path=config)
    logger = setup_logging(level=loaded_config.log_level, verbose=verbose)

    ctx.obj = CliState(config=loaded_config, config_meta=meta, logger=logger)

    if meta.error:
        # stderr: stdout carries the MCP stream under `serve`
        stderr_console.print(
            Panel(
                f"[bold red]Configuration Error - Safe Mode Active[/bold red]\n\n"
                f"Failed to load {escape(str(meta.path))}:\n{escape(meta.error)}\n\n"
                f"[yellow]Using default settings.[/yellow]",
                border_style="red",
            )
        )
    else:
        logger.debug(
            "Loaded configuration from %s (env overrides: %s)",
            meta.path,
            sorted(meta.env_overrides),
        )


@app.command("serve")
def serve(
    ctx: typer.Context,
    project_root: Path | None = typer.Option(
        None, "--project-root", "-p", help="Repository to create task worktrees in."
    ),
) -> None:
    """Run the task manager as an MCP server over stdio."""
    from .mcp.server import main as run_server

    state: CliState = ctx.obj
    config = state.config
    if project_root is not None:
        config = config.model_copy(update={"project_root": project_root.expanduser()})
    state.logger.info("Starting MCP server (project root: %s)", config.project_root or "unset")
    run_server(config)


@app.command("agents")
def list_agents() -> None:
    """List the agent CLIs tasks can run."""
    table = Table(title="Agents", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Command", style="green")
    table.add_column("Description", style="white")

    for agent in AgentCatalog().list():
        command = " ".join([agent.command, *agent.args])
        table.add_row(agent.id, command, agent.description)

    console.print(table)


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show the active configuration and where it came from."""
    state: CliState = ctx.obj
    config = state.config
    meta = state.config_meta

    table = Table(title="Config", box=box.SIMPLE, expand=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in config.model_dump().items():
        table.add_row(key, str(value))

    console.print(table)

    meta_lines = [
        f"Path: {meta.path}",
        "File loaded: yes" if meta.file_loaded else "File loaded: no (using defaults + env)",
    ]

    if meta.env_overrides:
        meta_lines.append("Env overrides: " + ", ".join(sorted(meta.env_overrides)))

    console.print(Panel("\n".join(meta_lines), title="Config source", box=box.SIMPLE))


@app.command("version")
def show_version() -> None:
    """Print the agentdeck version."""
    console.print(__version__)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
