"""``slipway version`` / ``slipway decode`` — the time-derived version codec."""

from __future__ import annotations

from datetime import datetime, timezone

import typer
from rich.console import Console

from slipway.config import get_settings
from slipway.core.branch_classifier import classify
from slipway.core.version_codec import VersionCodec
from slipway.errors import VersionRangeError
from slipway.models.versioning import Version

console = Console()


def version_cmd(
    at: datetime = typer.Option(
        None,
        "--at",
        help="Instant to encode (ISO 8601, naive means UTC). Default: now.",
    ),
    build: int = typer.Option(None, "--build", help="Build field (default: SLIPWAY_VERSION_BUILD)."),
    major: int = typer.Option(None, "--major", help="Major field (default: SLIPWAY_VERSION_MAJOR)."),
    branch: str = typer.Option(
        None, "--branch", "-b", help="Append the prerelease suffix for this branch."
    ),
) -> None:
    """Print the version a build started at the given instant would carry."""
    settings = get_settings()
    codec = VersionCodec(settings.version_epoch)
    instant = at or datetime.now(timezone.utc)
    try:
        version = codec.encode(
            instant,
            settings.version_build if build is None else build,
            settings.version_major if major is None else major,
        )
    except VersionRangeError as exc:
        console.print(f"[bold red]Cannot encode:[/bold red] {exc}")
        raise typer.Exit(code=1)

    suffix = classify(branch).affix.suffix if branch is not None else ""
    console.print(f"{version.full}{suffix}")


def decode_cmd(
    version: str = typer.Argument(..., help="A build.major.minor.revision version."),
) -> None:
    """Print the UTC instant (64-second resolution) a version was encoded from."""
    settings = get_settings()
    try:
        parsed = Version.parse(version)
    except ValueError as exc:
        console.print(f"[bold red]Invalid version:[/bold red] {exc}")
        raise typer.Exit(code=1)
    try:
        instant = VersionCodec(settings.version_epoch).decode(parsed)
    except VersionRangeError as exc:
        console.print(f"[bold red]Cannot decode:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(instant.isoformat())
