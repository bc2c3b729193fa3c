"""CLI for scoped-containers.

Provides a command-line interface using Typer for:
- Reaping stale containers of a scope/role on a shared host
- Listing labelled containers in a scope
- Generating a sample configuration
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from scoped_containers.core.config import load_config
from scoped_containers.core.constants import CONTAINER_LABEL_KEY, SCOPE_LABEL_KEY
from scoped_containers.core.errors import EngineOperationError
from scoped_containers.core.schemas import ReaperConfig, ScopeLabels
from scoped_containers.engine.client import ContainerSummary, docker_client_instance
from scoped_containers.reaper import ReapResult, reap
from scoped_containers.utils.logging import setup_logging

app = typer.Typer(
    name="scoped-containers",
    help="Reap stale scoped test containers",
    add_completion=False,
)

console = Console()


def _load(config: Path | None) -> ReaperConfig:
    try:
        if config is not None:
            return load_config(config, use_env=True)
        return ReaperConfig.from_env()
    except Exception as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e


def _resolve_scope(scope: str | None, reaper_config: ReaperConfig) -> str:
    scope = scope or reaper_config.scope
    if not scope:
        console.print("[bold red]Error:[/] Missing option '--scope' (or 'scope' in config).")
        raise typer.Exit(1)
    return scope


async def _list_scope(
    scope: str, role: str | None, include_stopped: bool, timeout: int
) -> list[ContainerSummary]:
    client = await docker_client_instance(timeout=timeout)
    if role is not None:
        filters = ScopeLabels(scope=scope, role=role).as_filters()
    else:
        filters = {"label": [f"{SCOPE_LABEL_KEY.format(scope=scope)}={scope}"]}
    return await client.list_containers(filters, all=include_stopped)


@app.command(name="reap")
def reap_stale(
    role: str = typer.Option(..., "--role", "-r", help="Container role within the scope"),
    scope: str | None = typer.Option(None, "--scope", "-s", help="Scope (overrides config)"),
    force: bool | None = typer.Option(
        None, "--force/--no-force", help="Stop running containers before pruning"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration file (YAML/JSON)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only list what would be removed"),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Stop (with --force) and prune stale containers of a scope/role."""
    setup_logging(level=log_level, json_format=json_logs, rich_console=not json_logs)

    reaper_config = _load(config)
    scope = _resolve_scope(scope, reaper_config)
    if force is None:
        force = reaper_config.force

    try:
        if dry_run:
            matches = asyncio.run(
                _list_scope(scope, role, True, reaper_config.docker_timeout_seconds)
            )
            removable = [c for c in matches if force or not c.is_running]
            _show_containers_table(f"Would remove ({scope}/{role})", removable, scope=scope)
            return

        result = asyncio.run(
            reap(scope, role, force, timeout=reaper_config.docker_timeout_seconds)
        )
    except EngineOperationError as e:
        console.print(f"[bold red]{e}[/]")
        raise typer.Exit(1) from e

    _show_reap_result(scope, role, result)


@app.command(name="ls")
def list_containers(
    scope: str | None = typer.Option(None, "--scope", "-s", help="Scope (overrides config)"),
    role: str | None = typer.Option(None, "--role", "-r", help="Only this container role"),
    include_stopped: bool = typer.Option(
        True, "--all/--running", help="Include stopped containers"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration file (YAML/JSON)"
    ),
) -> None:
    """List labelled containers belonging to a scope."""
    reaper_config = _load(config)
    scope = _resolve_scope(scope, reaper_config)

    try:
        containers = asyncio.run(
            _list_scope(scope, role, include_stopped, reaper_config.docker_timeout_seconds)
        )
    except EngineOperationError as e:
        console.print(f"[bold red]{e}[/]")
        raise typer.Exit(1) from e

    _show_containers_table(f"Containers in scope {scope}", containers, scope=scope)


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("scoped-containers.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# scoped-containers configuration
# Every value can be overridden with SCOPED_CONTAINERS_* environment variables,
# e.g. SCOPED_CONTAINERS_PRUNE=false disables cleanup on a CI runner.

# Scope shared by all containers of this project
scope: my-project

# Remove stale containers of the same scope/role before starting a new one
prune: true

# Also stop stale containers that are still running
force: false

# Docker API timeout (seconds)
docker_timeout_seconds: 60

# Forward container stdout (INFO) and stderr (ERROR) to logging
default_log_consumer: true
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _show_reap_result(scope: str, role: str, result: ReapResult) -> None:
    """Display what a reap stopped and pruned."""
    if result.is_empty:
        console.print(f"[bold green]No stale containers for {scope}/{role}[/]")
        return

    table = Table(title=f"Reaped {scope}/{role}")
    table.add_column("Container", style="cyan")
    table.add_column("Action", style="white")

    for cid in result.stopped:
        table.add_row(cid[:12], "[yellow]stopped[/]")
    for cid in result.pruned:
        table.add_row(cid[:12], "[red]pruned[/]")

    console.print(table)
    console.print(f"Reclaimed {result.space_reclaimed:,} bytes")


def _show_containers_table(
    title: str, containers: list[ContainerSummary], scope: str | None = None
) -> None:
    """Display a container listing."""
    if not containers:
        console.print("[bold yellow]No matching containers[/]")
        return

    table = Table(title=title)
    table.add_column("Container", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Role", style="magenta")
    table.add_column("State", style="green")
    table.add_column("Image", style="dim")

    for c in containers:
        role = ""
        if scope is not None:
            role = c.labels.get(CONTAINER_LABEL_KEY.format(scope=scope), "")
        state = f"[yellow]{c.state}[/]" if c.is_running else str(c.state)
        table.add_row(c.short_id, ", ".join(c.names), role, state, c.image or "")

    console.print(table)


if __name__ == "__main__":
    app()
