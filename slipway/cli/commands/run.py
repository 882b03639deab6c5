"""``slipway run`` — execute the full pipeline for a checkout.

Resolves the branch, encodes the version, discovers units, drives every
unit through its stages and fans out the results.  The process exit code
mirrors the run: 0 on success, 1 on any failure, 2 on a configuration error.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from slipway.cli.render import print_report
from slipway.config import get_settings
from slipway.core.driver import EXIT_CONFIG_ERROR, PipelineDriver, write_report
from slipway.errors import ConfigError

console = Console()

REPORT_FILENAME = "run-report.json"


def run_cmd(
    repo: Path = typer.Option(
        Path("."),
        "--repo",
        "-r",
        help="Repository root to build.",
    ),
    branch: str = typer.Option(
        None,
        "--branch",
        "-b",
        help="Branch name (default: SLIPWAY_BRANCH, CI variables, then git).",
    ),
    fail_fast: bool = typer.Option(
        None,
        "--fail-fast/--no-fail-fast",
        help="Stop after the first failed unit (default: SLIPWAY_FAIL_FAST).",
    ),
    report_path: Path = typer.Option(
        None,
        "--report",
        help="Where to write the JSON run report (default: <artifacts>/run-report.json).",
    ),
) -> None:
    """Build, test, package and publish every project under the repository."""
    settings = get_settings()
    if fail_fast is not None:
        settings = settings.model_copy(update={"fail_fast": fail_fast})

    repo_root = repo.resolve()
    try:
        driver = PipelineDriver(settings)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    report = driver.run(repo_root, branch)
    if report.config_error:
        console.print(f"[bold red]Configuration error:[/bold red] {report.config_error}")
    else:
        print_report(report, console)

    if report_path is None and report.context is not None:
        report_path = report.context.artifacts_root / REPORT_FILENAME
    if report_path is not None:
        written = write_report(report, report_path)
        console.print(f"[dim]Report written to {written}[/dim]")

    raise typer.Exit(code=report.exit_code)
