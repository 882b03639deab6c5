"""What a finished run hands to the fan-out phase."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from slipway.core.strategies import stage_output_dir
from slipway.models.context import RunContext
from slipway.models.stages import Stage
from slipway.models.units import BuildUnit

PACKAGE_PATTERNS: tuple[str, ...] = ("*.nupkg", "*.snupkg")


class UnitArtifacts(BaseModel):
    """Artifacts of one unit that reached DONE."""

    model_config = ConfigDict(frozen=True)

    unit: BuildUnit
    output_dir: Path
    packages: tuple[Path, ...] = ()
    publish_dir: Path | None = None

    @property
    def distributable_dir(self) -> Path:
        """Publish output if the unit published, else the whole unit output."""
        return self.publish_dir or self.output_dir


def collect_artifacts(context: RunContext, units: list[BuildUnit]) -> list[UnitArtifacts]:
    """Gather package files and publish output for *units*, in unit order."""
    collected: list[UnitArtifacts] = []
    for unit in units:
        output_dir = context.unit_output_dir(unit)
        if not output_dir.is_dir():
            continue
        pack_dir = stage_output_dir(context, unit, Stage.PACK)
        packages: list[Path] = []
        if pack_dir.is_dir():
            for pattern in PACKAGE_PATTERNS:
                packages.extend(sorted(pack_dir.glob(pattern)))
        publish_dir = stage_output_dir(context, unit, Stage.PUBLISH)
        collected.append(
            UnitArtifacts(
                unit=unit,
                output_dir=output_dir,
                packages=tuple(packages),
                publish_dir=publish_dir if publish_dir.is_dir() else None,
            )
        )
    return collected
