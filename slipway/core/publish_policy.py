"""Channel -> publish destinations, as a static lookup table.

| Channel     | LocalFeed | GitHubFeed | TestRegistry | PublicRegistry | ChannelDrop | DistributionDrop |
|-------------|-----------|------------|--------------|----------------|-------------|------------------|
| development | yes       | no         | no           | no             | yes         | no               |
| quality     | yes       | yes        | yes          | no             | yes         | no               |
| staging     | yes       | yes        | yes          | no             | yes         | no               |
| production  | yes       | yes        | no           | yes            | yes         | yes              |

``unknown`` gets the development (local-only) row.  The latest drop follows
the channel drop; the zip drop follows the distribution drop.  Whatever the
table says, the release guard strips the public registry from every
non-production plan.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from slipway.core.release_guard import guard_public_targets
from slipway.models.deployment import DeploymentChannel
from slipway.models.publishing import PublishPlan, PublishTarget, PublishTargetKind

if TYPE_CHECKING:
    from slipway.config import SlipwaySettings

logger = logging.getLogger(__name__)

LOCAL_FEED = "LocalFeed"
GITHUB_FEED = "GitHubFeed"
TEST_REGISTRY = "TestRegistry"
PUBLIC_REGISTRY = "PublicRegistry"
CHANNEL_DROP = "ChannelDrop"
LATEST_DROP = "LatestDrop"
DISTRIBUTION_DROP = "DistributionDrop"
ZIP_DROP = "ZipDrop"


class PolicyRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    local_feed: bool
    github_feed: bool
    test_registry: bool
    public_registry: bool
    channel_drop: bool
    distribution_drop: bool

    @property
    def latest_drop(self) -> bool:
        return self.channel_drop

    @property
    def zip_drop(self) -> bool:
        return self.distribution_drop


CHANNEL_TABLE: dict[DeploymentChannel, PolicyRow] = {
    DeploymentChannel.DEVELOPMENT: PolicyRow(
        local_feed=True, github_feed=False, test_registry=False,
        public_registry=False, channel_drop=True, distribution_drop=False,
    ),
    DeploymentChannel.QUALITY: PolicyRow(
        local_feed=True, github_feed=True, test_registry=True,
        public_registry=False, channel_drop=True, distribution_drop=False,
    ),
    DeploymentChannel.STAGING: PolicyRow(
        local_feed=True, github_feed=True, test_registry=True,
        public_registry=False, channel_drop=True, distribution_drop=False,
    ),
    DeploymentChannel.PRODUCTION: PolicyRow(
        local_feed=True, github_feed=True, test_registry=False,
        public_registry=True, channel_drop=True, distribution_drop=True,
    ),
}

CONSERVATIVE_ROW = CHANNEL_TABLE[DeploymentChannel.DEVELOPMENT]


class PublishPolicy:
    """Builds the ordered publish plan for a channel.

    Parameters
    ----------
    table:
        Channel policy rows.  Defaults to ``CHANNEL_TABLE``; injectable so the
        independent public-registry guard can be exercised.
    """

    def __init__(
        self,
        *,
        local_feed_dir: Path = Path("artifacts/feed"),
        drop_root: Path = Path("artifacts/drops"),
        distribution_root: Path = Path("artifacts/distribution"),
        zip_root: Path = Path("artifacts/zip"),
        github_feed_url: str = "",
        test_registry_url: str = "",
        public_registry_url: str = "",
        table: dict[DeploymentChannel, PolicyRow] | None = None,
    ) -> None:
        self._local_feed_dir = local_feed_dir
        self._drop_root = drop_root
        self._distribution_root = distribution_root
        self._zip_root = zip_root
        self._github_feed_url = github_feed_url
        self._test_registry_url = test_registry_url
        self._public_registry_url = public_registry_url
        self._table = table if table is not None else CHANNEL_TABLE

    @classmethod
    def from_settings(cls, settings: SlipwaySettings, repo_root: Path) -> PublishPolicy:
        return cls(
            local_feed_dir=settings.resolve_path(repo_root, settings.local_feed_dir),
            drop_root=settings.resolve_path(repo_root, settings.drop_root),
            distribution_root=settings.resolve_path(repo_root, settings.distribution_root),
            zip_root=settings.resolve_path(repo_root, settings.zip_root),
            github_feed_url=settings.github_feed_url,
            test_registry_url=settings.test_registry_url,
            public_registry_url=settings.public_registry_url,
        )

    def row_for(self, channel: DeploymentChannel) -> PolicyRow:
        return self._table.get(channel, CONSERVATIVE_ROW)

    def targets_for(self, channel: DeploymentChannel) -> PublishPlan:
        """Ordered destinations and drop flags for *channel*."""
        row = self.row_for(channel)
        candidates: list[tuple[bool, PublishTarget]] = [
            (row.local_feed, PublishTarget(
                name=LOCAL_FEED, kind=PublishTargetKind.LOCAL_FEED,
                destination=str(self._local_feed_dir),
            )),
            (row.github_feed, PublishTarget(
                name=GITHUB_FEED, kind=PublishTargetKind.REMOTE_FEED,
                destination=self._github_feed_url, credential_ref="github_token",
            )),
            (row.test_registry, PublishTarget(
                name=TEST_REGISTRY, kind=PublishTargetKind.REMOTE_FEED,
                destination=self._test_registry_url, credential_ref="test_registry_api_key",
            )),
            (row.public_registry, PublishTarget(
                name=PUBLIC_REGISTRY, kind=PublishTargetKind.REMOTE_FEED,
                destination=self._public_registry_url,
                credential_ref="public_registry_api_key", public=True,
            )),
            (row.channel_drop, PublishTarget(
                name=CHANNEL_DROP, kind=PublishTargetKind.FILESYSTEM_DROP,
                destination=str(self._drop_root),
            )),
            (row.latest_drop, PublishTarget(
                name=LATEST_DROP, kind=PublishTargetKind.FILESYSTEM_DROP,
                destination=str(self._drop_root),
            )),
            (row.distribution_drop, PublishTarget(
                name=DISTRIBUTION_DROP, kind=PublishTargetKind.FILESYSTEM_DROP,
                destination=str(self._distribution_root),
            )),
            (row.zip_drop, PublishTarget(
                name=ZIP_DROP, kind=PublishTargetKind.FILESYSTEM_DROP,
                destination=str(self._zip_root),
            )),
        ]
        targets = guard_public_targets(channel, [t for enabled, t in candidates if enabled])
        names = {t.name for t in targets}

        plan = PublishPlan(
            channel=channel,
            targets=tuple(targets),
            copy_to_channel_drop=CHANNEL_DROP in names,
            copy_to_latest_drop=LATEST_DROP in names,
            copy_to_distribution_drop=DISTRIBUTION_DROP in names,
            copy_to_zip_drop=ZIP_DROP in names,
        )
        logger.info(
            "Publish plan for %s: %s", channel.value, ", ".join(plan.target_names) or "none"
        )
        return plan
