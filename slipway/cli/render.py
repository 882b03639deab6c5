"""Rich renderables for run reports, plans and discovery results.

Color scheme
------------
- green     : succeeded / DONE
- red       : failed / FAILED
- yellow    : skipped or in progress
- dim       : not applicable
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from slipway.models.context import RunReport
from slipway.models.deployment import DeploymentInfo
from slipway.models.publishing import PublishPlan
from slipway.models.stages import Stage, UnitState
from slipway.models.units import BuildUnit

_STATE_ICONS: dict[UnitState, str] = {
    UnitState.DONE: "[green]DONE[/green]",
    UnitState.FAILED: "[bold red]FAILED[/bold red]",
}

_STAGE_COLUMNS: tuple[Stage, ...] = (
    Stage.RESTORE, Stage.CLEAN, Stage.BUILD, Stage.TEST,
    Stage.PACK, Stage.PUBLISH, Stage.DOCS,
)


def _yes_no(flag: bool | None) -> str:
    if flag is None:
        return "[dim]?[/dim]"
    return "[green]yes[/green]" if flag else "[dim]no[/dim]"


def deployment_panel(info: DeploymentInfo, version: str | None = None) -> Panel:
    lines = [
        f"[bold]Branch:[/bold]   {info.branch.raw_name or '[dim](empty)[/dim]'}",
        f"[bold]Segments:[/bold] {' / '.join(info.branch.segments)}",
        f"[bold]Channel:[/bold]  {info.channel.value}",
        f"[bold]Suffix:[/bold]   {info.affix.suffix or '[dim](none)[/dim]'}",
        f"[bold]Label:[/bold]    {info.affix.label}",
    ]
    if version:
        lines.append(f"[bold]Version:[/bold]  {version}")
    return Panel("\n".join(lines), title="[bold]Deployment[/bold]", border_style="cyan")


def units_table(units: list[BuildUnit]) -> Table:
    table = Table(title="Build Units (processing order)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Solution", style="cyan")
    table.add_column("Project", style="bold")
    table.add_column("Test", justify="center")
    table.add_column("Path", style="dim")
    for index, unit in enumerate(units, start=1):
        table.add_row(
            str(index), unit.solution_name, unit.project_name,
            _yes_no(unit.is_test_project), str(unit.project_path),
        )
    return table


def plan_table(plan: PublishPlan) -> Table:
    table = Table(title=f"Publish plan — {plan.channel.value}")
    table.add_column("Order", justify="right", style="dim")
    table.add_column("Target", style="cyan")
    table.add_column("Kind")
    table.add_column("Destination")
    table.add_column("Credential", style="dim")
    for index, target in enumerate(plan.targets, start=1):
        name = f"[bold magenta]{target.name}[/bold magenta]" if target.public else target.name
        table.add_row(
            str(index), name, target.kind.value,
            target.destination or "[red](unset)[/red]", target.credential_ref or "",
        )
    return table


def report_panel(report: RunReport) -> Panel:
    """Summarise a finished run: per-unit stage results plus fan-out."""
    table = Table(expand=True)
    table.add_column("Unit", style="bold")
    for stage in _STAGE_COLUMNS:
        table.add_column(stage.value, justify="center")
    table.add_column("State", justify="center")

    by_unit: dict[str, dict[Stage, list[bool]]] = {}
    for outcome in report.outcomes:
        by_unit.setdefault(outcome.unit.key, {}).setdefault(outcome.stage, []).append(
            outcome.succeeded
        )

    for key, state in report.unit_states.items():
        stages = by_unit.get(key, {})
        cells = []
        for stage in _STAGE_COLUMNS:
            results = stages.get(stage)
            if not results:
                cells.append("[dim]-[/dim]")
            elif all(results):
                cells.append("[green]ok[/green]")
            else:
                cells.append("[bold red]x[/bold red]")
        table.add_row(key, *cells, _STATE_ICONS.get(state, f"[yellow]{state.value}[/yellow]"))

    parts: list[str] = []
    if report.context is not None:
        parts.append(f"[bold]Run:[/bold] {report.context.run_id}")
        parts.append(f"[bold]Channel:[/bold] {report.context.deployment.channel.value}")
        parts.append(f"[bold]Version:[/bold] {report.context.package_version}")
    for outcome in report.fan_out:
        mark = "[green]ok[/green]" if outcome.succeeded else "[bold red]failed[/bold red]"
        parts.append(f"[bold]{outcome.target}:[/bold] {mark}")
    summary = "  |  ".join(parts)

    body: list = [table, Text(""), Text.from_markup(summary)]
    for error in report.discovery_errors:
        body.append(Text.from_markup(f"[red]Discovery:[/red] {error}"))
    for outcome in report.failed_fan_out:
        body.append(Text.from_markup(f"[red]{outcome.target}:[/red] {outcome.message or ''}"))

    border = "green" if report.exit_code == 0 else "red"
    return Panel(Group(*body), title="[bold]Slipway Run[/bold]", border_style=border)


def print_report(report: RunReport, console: Console | None = None) -> None:
    (console or Console()).print(report_panel(report))
