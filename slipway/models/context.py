"""Run-scoped context and report models.

``RunContext`` replaces process-wide branch/version/output-folder state: it
is built once per run, frozen, and passed explicitly to every component.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from slipway.models.deployment import DeploymentInfo
from slipway.models.publishing import FanOutOutcome
from slipway.models.stages import StageOutcome, UnitState
from slipway.models.units import BuildUnit
from slipway.models.versioning import Version


class RunContext(BaseModel):
    """Immutable identity and layout of one pipeline run."""

    model_config = ConfigDict(frozen=True)

    run_id: str = Field(default_factory=lambda: f"sw-{uuid.uuid4().hex[:12]}")
    repo_root: Path
    source_root: Path
    artifacts_root: Path
    deployment: DeploymentInfo
    version: Version
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    configuration: str = "Release"
    fail_fast: bool = False
    docs_enabled: bool = False

    @property
    def package_version(self) -> str:
        """Version plus the channel's pre-release suffix."""
        return f"{self.version.full}{self.deployment.affix.suffix}"

    def unit_output_dir(self, unit: BuildUnit) -> Path:
        """Output directory partitioned by solution, project, branch and version.

        Distinct units, branches or versions never share a directory.
        """
        return (
            self.artifacts_root
            / unit.layout
            / Path(*self.deployment.branch.segments)
            / self.version.full
        )


class RunReport(BaseModel):
    """Everything a finished run produced, in order."""

    model_config = ConfigDict(frozen=True)

    context: RunContext | None = None
    outcomes: list[StageOutcome] = []
    unit_states: dict[str, UnitState] = {}
    fan_out: list[FanOutOutcome] = []
    discovery_errors: list[str] = []
    config_error: str | None = None
    exit_code: int = 0

    @property
    def failed_units(self) -> list[str]:
        return [p for p, s in self.unit_states.items() if s == UnitState.FAILED]

    @property
    def failed_fan_out(self) -> list[FanOutOutcome]:
        return [o for o in self.fan_out if not o.succeeded]
