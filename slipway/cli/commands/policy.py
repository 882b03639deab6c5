"""``slipway policy CHANNEL`` — show the publish plan for a channel."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from slipway.cli.render import plan_table
from slipway.config import get_settings
from slipway.core.publish_policy import PublishPolicy
from slipway.models.deployment import DeploymentChannel

console = Console()


def policy_cmd(
    channel: DeploymentChannel = typer.Argument(..., help="Deployment channel."),
    repo: Path = typer.Option(Path("."), "--repo", "-r", help="Repository root."),
) -> None:
    """List the publish targets a run on CHANNEL would deliver to."""
    settings = get_settings()
    plan = PublishPolicy.from_settings(settings, repo.resolve()).targets_for(channel)
    console.print(plan_table(plan))
    flags = {
        "channel drop": plan.copy_to_channel_drop,
        "latest drop": plan.copy_to_latest_drop,
        "distribution drop": plan.copy_to_distribution_drop,
        "zip drop": plan.copy_to_zip_drop,
    }
    console.print(
        "  ".join(
            f"[bold]{name}:[/bold] {'[green]yes[/green]' if flag else '[dim]no[/dim]'}"
            for name, flag in flags.items()
        )
    )
