"""FanOutDispatcher — delivers the run's artifacts to every planned destination.

Destinations are attempted independently and in plan order.  A failure in
one destination is recorded and never prevents attempting the rest.
"""

from __future__ import annotations

import logging

from slipway.fanout.artifacts import UnitArtifacts
from slipway.fanout.destinations import Destination
from slipway.models.publishing import FanOutOutcome

logger = logging.getLogger(__name__)


class FanOutDispatcher:
    """Routes artifacts to ALL registered destinations.

    Usage
    -----
    >>> dispatcher = FanOutDispatcher()
    >>> dispatcher.register(local_feed)
    >>> dispatcher.register(channel_drop)
    >>> outcomes = dispatcher.dispatch(artifacts)
    """

    def __init__(self, destinations: list[Destination] | None = None) -> None:
        self._destinations: list[Destination] = []
        for destination in destinations or []:
            self.register(destination)

    def register(self, destination: Destination) -> None:
        """Register a destination.  Re-registering the same instance is ignored."""
        if destination not in self._destinations:
            self._destinations.append(destination)
            logger.debug("Registered destination: %s", destination.name)

    @property
    def destinations(self) -> list[Destination]:
        return list(self._destinations)

    def dispatch(self, artifacts: list[UnitArtifacts]) -> list[FanOutOutcome]:
        """Deliver *artifacts* everywhere; one outcome per destination."""
        if not self._destinations:
            logger.warning("No publish destinations for this run")
            return []

        outcomes: list[FanOutOutcome] = []
        for destination in self._destinations:
            try:
                delivered = destination.deliver(artifacts)
            except Exception as exc:  # noqa: BLE001
                logger.error("Destination %s failed: %s", destination.name, exc)
                outcomes.append(
                    FanOutOutcome(target=destination.name, succeeded=False, message=str(exc))
                )
                continue
            outcomes.append(
                FanOutOutcome(target=destination.name, succeeded=True, delivered=delivered)
            )

        failed = [o for o in outcomes if not o.succeeded]
        if failed:
            logger.warning(
                "Fan-out: %d/%d destinations succeeded, %d failed",
                len(outcomes) - len(failed),
                len(outcomes),
                len(failed),
            )
        return outcomes
