"""Publish-destination models — static policy rows and fan-out results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from slipway.models.deployment import DeploymentChannel


class PublishTargetKind(str, Enum):
    LOCAL_FEED = "local_feed"
    REMOTE_FEED = "remote_feed"
    FILESYSTEM_DROP = "filesystem_drop"


class PublishTarget(BaseModel):
    """A static destination entry selected by channel; never mutated at runtime.

    ``destination`` is a feed URL, a directory, or a drop flavour for
    filesystem drops.  ``credential_ref`` names the settings field holding
    the secret; the secret itself never lives on the target.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: PublishTargetKind
    destination: str
    credential_ref: str | None = None
    public: bool = False  # only production may write here


class PublishPlan(BaseModel):
    """Ordered destinations plus drop flags for one channel."""

    model_config = ConfigDict(frozen=True)

    channel: DeploymentChannel
    targets: tuple[PublishTarget, ...]
    copy_to_channel_drop: bool = False
    copy_to_latest_drop: bool = False
    copy_to_distribution_drop: bool = False
    copy_to_zip_drop: bool = False

    @property
    def target_names(self) -> list[str]:
        return [t.name for t in self.targets]

    def includes(self, name: str) -> bool:
        return name in self.target_names


class FanOutOutcome(BaseModel):
    """Result of delivering the run's artifacts to one destination."""

    model_config = ConfigDict(frozen=True)

    target: str
    succeeded: bool
    delivered: list[str] = []
    message: str | None = None
