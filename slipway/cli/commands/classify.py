"""``slipway classify BRANCH`` — show the channel and suffix for a branch."""

from __future__ import annotations

import typer
from rich.console import Console

from slipway.cli.render import deployment_panel
from slipway.core.branch_classifier import classify

console = Console()


def classify_cmd(
    branch: str = typer.Argument(..., help="Branch name as reported by the VCS."),
) -> None:
    """Classify a branch into a deployment channel."""
    console.print(deployment_panel(classify(branch)))
