"""Destination protocol and factory for artifact fan-out.

All destinations implement the ``Destination`` protocol: a ``name`` property
and a ``deliver(artifacts)`` method returning what was delivered.  The
dispatcher calls ``deliver`` on every destination in plan order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from slipway.fanout.artifacts import UnitArtifacts

if TYPE_CHECKING:
    from slipway.config import SlipwaySettings
    from slipway.core.process import ProcessRunner
    from slipway.models.context import RunContext
    from slipway.models.publishing import PublishPlan


@runtime_checkable
class Destination(Protocol):
    """Protocol every fan-out destination implements.

    Delivery must be idempotent: running the same fan-out twice leaves the
    destination in the same state.  Failures raise (``FanOutFailure`` or any
    ``OSError``); the dispatcher records them and moves on.
    """

    @property
    def name(self) -> str:
        """Return the publish target name."""
        ...

    def deliver(self, artifacts: list[UnitArtifacts]) -> list[str]:
        """Deliver *artifacts* and return the delivered item names."""
        ...


def build_destinations(
    plan: PublishPlan,
    context: RunContext,
    settings: SlipwaySettings,
    runner: ProcessRunner,
) -> list[Destination]:
    """Instantiate one destination per plan target, in plan order."""
    from slipway.fanout.destinations.drops import DropDestination
    from slipway.fanout.destinations.feeds import LocalFeedDestination, RemoteFeedDestination
    from slipway.models.publishing import PublishTargetKind

    destinations: list[Destination] = []
    for target in plan.targets:
        if target.kind == PublishTargetKind.LOCAL_FEED:
            destinations.append(LocalFeedDestination(target))
        elif target.kind == PublishTargetKind.REMOTE_FEED:
            destinations.append(
                RemoteFeedDestination(
                    target,
                    context,
                    runner,
                    api_key=settings.credential(target.credential_ref),
                    dotnet_tool=settings.dotnet_tool,
                )
            )
        else:
            destinations.append(DropDestination(target, context))
    return destinations


__all__ = ["Destination", "build_destinations"]
