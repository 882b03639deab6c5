"""Release guard — hard constraints checked before any unit runs.

The guard validates that the run can reach every destination its channel
requires (tools on PATH, credentials configured) and fails hard with
``ConfigError`` when it cannot.  All violations are collected and reported
at once.

It also owns the public-registry rule: only ``production`` may write to a
public target.  The rule is enforced here, independently of the channel
table, once when the plan is built and again at push time.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from slipway.errors import ConfigError, FanOutFailure
from slipway.models.deployment import DeploymentChannel
from slipway.models.publishing import PublishPlan, PublishTarget, PublishTargetKind
from slipway.models.units import BuildTool, BuildUnit, ToolchainSelection

if TYPE_CHECKING:
    from slipway.config import SlipwaySettings

logger = logging.getLogger(__name__)


def guard_public_targets(
    channel: DeploymentChannel, targets: Iterable[PublishTarget]
) -> list[PublishTarget]:
    """Drop public targets from any non-production target list."""
    kept: list[PublishTarget] = []
    for target in targets:
        if target.public and channel != DeploymentChannel.PRODUCTION:
            logger.critical(
                "Refusing public target %s for channel %s; only production may publish there.",
                target.name,
                channel.value,
            )
            continue
        kept.append(target)
    return kept


def assert_public_push_allowed(channel: DeploymentChannel, target: PublishTarget) -> None:
    """Raise ``FanOutFailure`` if *target* is public and the channel is not production."""
    if target.public and channel != DeploymentChannel.PRODUCTION:
        raise FanOutFailure(
            target.name,
            f"public registry push refused for channel {channel.value}",
        )


def required_tools(settings: SlipwaySettings) -> list[str]:
    """Executables the run cannot start without.

    The legacy build tool is not listed: whether it is needed is only known
    after discovery (see ``enforce_build_tools``).
    """
    tools = [settings.dotnet_tool]
    if settings.property_reader.lower() == "drydock":
        tools.append(settings.drydock_tool)
    if settings.docs_enabled:
        tools.append(settings.docs_tool)
    return tools


def enforce_release_constraints(
    settings: SlipwaySettings,
    plan: PublishPlan,
    *,
    which: Callable[[str], str | None] = shutil.which,
) -> None:
    """Validate tools and credentials for *plan*.

    Constraints enforced
    --------------------
    1. Every required tool resolves on PATH.
    2. Every remote feed in the plan has a destination URL and a
       non-empty credential.
    3. Debug mode is off for production runs.

    Raises
    ------
    ConfigError
        If any constraint is violated.
    """
    violations: list[str] = []

    for tool in required_tools(settings):
        if which(tool) is None:
            violations.append(f"Required tool '{tool}' was not found on PATH.")

    for target in plan.targets:
        if target.kind != PublishTargetKind.REMOTE_FEED:
            continue
        if not target.destination:
            violations.append(f"Publish target '{target.name}' has no feed URL configured.")
        if target.credential_ref and not settings.credential(target.credential_ref):
            violations.append(
                f"Publish target '{target.name}' requires a credential. "
                f"Set SLIPWAY_{target.credential_ref.upper()}."
            )

    if plan.channel == DeploymentChannel.PRODUCTION and settings.debug:
        violations.append(
            "debug=True is not allowed for production releases. Set SLIPWAY_DEBUG=false."
        )

    if violations:
        msg = "Release guard failed.\n" + "\n".join(f"  - {v}" for v in violations)
        logger.critical(msg)
        raise ConfigError(msg)

    logger.info("Release guard passed for channel %s.", plan.channel.value)


def enforce_build_tools(
    settings: SlipwaySettings,
    selections: Iterable[tuple[BuildUnit, ToolchainSelection]],
    *,
    which: Callable[[str], str | None] = shutil.which,
) -> None:
    """Require the legacy build tool on PATH when any discovered unit needs it.

    Runs after discovery, once toolchains are known; a tree of SDK-style
    projects builds without msbuild installed.
    """
    legacy = [
        unit.key for unit, selection in selections
        if selection.tool == BuildTool.LEGACY_MSBUILD_TOOL
    ]
    if not legacy or which(settings.msbuild_tool) is not None:
        return
    msg = (
        f"Required tool '{settings.msbuild_tool}' was not found on PATH; "
        f"legacy project(s) need it: {', '.join(legacy)}. Set SLIPWAY_MSBUILD_TOOL."
    )
    logger.critical(msg)
    raise ConfigError(msg)
