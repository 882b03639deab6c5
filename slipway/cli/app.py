"""Main Typer application — imports and registers all CLI commands.

Entry point: ``slipway`` (configured via pyproject.toml console_scripts).

Commands: run, version, decode, classify, discover, policy, inspect.
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from slipway.cli.commands.classify import classify_cmd
from slipway.cli.commands.discover import discover_cmd
from slipway.cli.commands.inspect import inspect_cmd
from slipway.cli.commands.policy import policy_cmd
from slipway.cli.commands.run import run_cmd
from slipway.cli.commands.version import decode_cmd, version_cmd
from slipway.config import get_settings

app = typer.Typer(
    name="slipway",
    help="Slipway: branch-aware build, test, package and publish for .NET source trees.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def configure(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (default: SLIPWAY_LOG_LEVEL)."
    ),
) -> None:
    """Slipway: branch-aware build, test, package and publish for .NET source trees."""
    level = (log_level or get_settings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="run", help="Run the full pipeline for a repository.")(run_cmd)
app.command(name="version", help="Encode the build version for an instant.")(version_cmd)
app.command(name="decode", help="Decode a build version back to its instant.")(decode_cmd)
app.command(name="classify", help="Classify a branch into a deployment channel.")(classify_cmd)
app.command(name="discover", help="List build units in processing order.")(discover_cmd)
app.command(name="policy", help="Show the publish plan for a channel.")(policy_cmd)
app.command(name="inspect", help="Show the toolchain selected for one project.")(inspect_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
