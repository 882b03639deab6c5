"""Package feed destinations — a local folder feed and remote NuGet feeds."""

from __future__ import annotations

import filecmp
import logging
import shutil
from pathlib import Path

from slipway.core.process import ProcessRunner
from slipway.core.release_guard import assert_public_push_allowed
from slipway.errors import FanOutFailure
from slipway.fanout.artifacts import UnitArtifacts
from slipway.models.context import RunContext
from slipway.models.publishing import PublishTarget

logger = logging.getLogger(__name__)


class LocalFeedDestination:
    """Copies packages into a folder feed.

    Layout: {destination}/{package file}.  A package already present with
    identical content is left alone.
    """

    def __init__(self, target: PublishTarget) -> None:
        self._target = target
        self._feed = Path(target.destination)

    @property
    def name(self) -> str:
        return self._target.name

    def deliver(self, artifacts: list[UnitArtifacts]) -> list[str]:
        self._feed.mkdir(parents=True, exist_ok=True)
        delivered: list[str] = []
        for unit_artifacts in artifacts:
            for package in unit_artifacts.packages:
                target_file = self._feed / package.name
                if target_file.exists() and filecmp.cmp(package, target_file, shallow=False):
                    logger.debug("LocalFeed: %s already present", package.name)
                else:
                    shutil.copy2(package, target_file)
                    logger.info("LocalFeed: copied %s", package.name)
                delivered.append(package.name)
        return delivered


class RemoteFeedDestination:
    """Pushes packages with ``dotnet nuget push --skip-duplicate``.

    Every package is attempted; the destination fails if any push fails.
    Public targets are re-checked against the channel before anything is
    pushed.
    """

    def __init__(
        self,
        target: PublishTarget,
        context: RunContext,
        runner: ProcessRunner,
        *,
        api_key: str,
        dotnet_tool: str = "dotnet",
    ) -> None:
        self._target = target
        self._context = context
        self._runner = runner
        self._api_key = api_key
        self._dotnet = dotnet_tool

    @property
    def name(self) -> str:
        return self._target.name

    def deliver(self, artifacts: list[UnitArtifacts]) -> list[str]:
        assert_public_push_allowed(self._context.deployment.channel, self._target)

        delivered: list[str] = []
        failed: list[str] = []
        for unit_artifacts in artifacts:
            for package in unit_artifacts.packages:
                if package.suffix == ".snupkg":
                    continue  # pushed alongside its .nupkg
                result = self._runner.run(
                    [
                        self._dotnet, "nuget", "push", str(package),
                        "--source", self._target.destination,
                        "--api-key", self._api_key,
                        "--skip-duplicate",
                    ]
                )
                if result.succeeded:
                    logger.info("%s: pushed %s", self.name, package.name)
                    delivered.append(package.name)
                else:
                    logger.error(
                        "%s: push of %s failed (exit %d)", self.name, package.name, result.exit_code
                    )
                    failed.append(package.name)

        if failed:
            raise FanOutFailure(
                self.name, f"{len(failed)} package(s) rejected: {', '.join(failed)}"
            )
        return delivered
