"""Filesystem drops — channel, latest, distribution and zip.

Layouts::

    ChannelDrop       {root}/{branch segments}/{version}/{unit layout}/
    LatestDrop        {root}/{branch segments}/latest/{unit layout}/
    DistributionDrop  {root}/{version}/{unit layout}/
    ZipDrop           {root}/{version}/{unit layout, dot-joined}-{package version}.zip

The latest drop is replaced on every run; the others are overwritten in
place, so repeating a fan-out is harmless.

``{unit layout}`` is the solution's folder below the source root, the
solution name and the project name (see ``BuildUnit.layout``).
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from slipway.core.publish_policy import (
    CHANNEL_DROP,
    DISTRIBUTION_DROP,
    LATEST_DROP,
    ZIP_DROP,
)
from slipway.fanout.artifacts import UnitArtifacts
from slipway.models.context import RunContext
from slipway.models.publishing import PublishTarget

logger = logging.getLogger(__name__)


class DropDestination:
    """Copies unit outputs into one of the drop layouts."""

    def __init__(self, target: PublishTarget, context: RunContext) -> None:
        if target.name not in (CHANNEL_DROP, LATEST_DROP, DISTRIBUTION_DROP, ZIP_DROP):
            raise ValueError(f"Unknown drop target: {target.name}")
        self._target = target
        self._context = context
        self._root = Path(target.destination)

    @property
    def name(self) -> str:
        return self._target.name

    def deliver(self, artifacts: list[UnitArtifacts]) -> list[str]:
        delivered: list[str] = []
        for unit_artifacts in artifacts:
            delivered.append(self._deliver_one(unit_artifacts))
        return delivered

    def _deliver_one(self, unit_artifacts: UnitArtifacts) -> str:
        unit = unit_artifacts.unit
        branch = Path(*self._context.deployment.branch.segments)
        version = self._context.version.full

        if self.name == ZIP_DROP:
            zip_dir = self._root / version
            zip_dir.mkdir(parents=True, exist_ok=True)
            base = zip_dir / (
                f"{'.'.join(unit.layout.parts)}-{self._context.package_version}"
            )
            archive = shutil.make_archive(
                str(base), "zip", root_dir=unit_artifacts.distributable_dir
            )
            logger.info("ZipDrop: wrote %s", archive)
            return Path(archive).name

        if self.name == CHANNEL_DROP:
            target_dir = self._root / branch / version / unit.layout
            source = unit_artifacts.output_dir
        elif self.name == LATEST_DROP:
            target_dir = self._root / branch / "latest" / unit.layout
            source = unit_artifacts.output_dir
            if target_dir.exists():
                shutil.rmtree(target_dir)
        else:
            target_dir = self._root / version / unit.layout
            source = unit_artifacts.distributable_dir

        shutil.copytree(source, target_dir, dirs_exist_ok=True)
        logger.info("%s: copied %s to %s", self.name, unit.key, target_dir)
        return unit.key
