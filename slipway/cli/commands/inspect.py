"""``slipway inspect PROJECT`` — show how one project would be built."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from slipway.config import get_settings
from slipway.core.discovery import UnitInspector, is_test_project
from slipway.core.process import ProcessRunner
from slipway.core.toolchain import ToolchainSelector
from slipway.errors import ConfigError, DiscoveryError
from slipway.models.units import BuildUnit
from slipway.readers import create_property_reader

console = Console()


def inspect_cmd(
    project: Path = typer.Argument(..., help="Path to a .csproj/.vbproj/.fsproj file."),
    solution: Path = typer.Option(
        None, "--solution", "-s", help="Owning solution (only used for naming)."
    ),
) -> None:
    """Resolve the toolchain and packaging flags for a single project."""
    settings = get_settings()
    try:
        reader = create_property_reader(settings, ProcessRunner())
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=2)

    project_path = project.resolve()
    try:
        unit = BuildUnit(
            solution_path=(solution or project).resolve(),
            project_path=project_path,
            is_test_project=is_test_project(reader, project_path),
        )
        resolved, selection = UnitInspector(reader, ToolchainSelector(reader)).inspect(unit)
    except DiscoveryError as exc:
        console.print(f"[bold red]Cannot classify:[/bold red] {exc}")
        raise typer.Exit(code=1)

    sdk = reader.get_project_sdk(project_path)
    lines = [
        f"[bold]Project:[/bold]    {project_path}",
        f"[bold]SDK:[/bold]        {sdk.value if sdk.is_value else '[dim](none)[/dim]'}",
        f"[bold]Style:[/bold]      {selection.target_kind.value}",
        f"[bold]Frameworks:[/bold] {', '.join(sorted(selection.target_frameworks))}"
        f" [dim](from {selection.source_property})[/dim]",
        f"[bold]Framework:[/bold]  {selection.framework_kind.value}",
        f"[bold]Tool:[/bold]       [cyan]{selection.tool.value}[/cyan]",
        f"[bold]Test:[/bold]       {resolved.is_test_project}",
        f"[bold]Packable:[/bold]   {resolved.is_packable}",
        f"[bold]Publishable:[/bold] {resolved.is_publishable}",
    ]
    console.print(Panel("\n".join(lines), title=f"[bold]{unit.project_name}[/bold]"))
