"""``slipway discover`` — list build units in processing order."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from slipway.cli.render import units_table
from slipway.config import get_settings
from slipway.core.discovery import ProjectDiscovery
from slipway.core.process import ProcessRunner
from slipway.errors import ConfigError
from slipway.readers import create_property_reader

console = Console()


def discover_cmd(
    repo: Path = typer.Option(Path("."), "--repo", "-r", help="Repository root."),
) -> None:
    """Discover solutions and projects (test projects first)."""
    settings = get_settings()
    try:
        reader = create_property_reader(settings, ProcessRunner())
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=2)

    discovery = ProjectDiscovery(reader, settings.source_dir)
    units, errors = discovery.discover_partial(repo.resolve())
    if units:
        console.print(units_table(units))
    else:
        console.print("[dim]No build units found.[/dim]")
    for error in errors:
        console.print(f"[red]Discovery error:[/red] {error}")
    if errors:
        raise typer.Exit(code=1)
