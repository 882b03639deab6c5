"""Post-build fan-out — distributes run artifacts per the channel's publish plan."""

from slipway.fanout.artifacts import UnitArtifacts, collect_artifacts
from slipway.fanout.dispatcher import FanOutDispatcher

__all__ = ["FanOutDispatcher", "UnitArtifacts", "collect_artifacts"]
