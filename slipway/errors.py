"""Error taxonomy for pipeline runs.

- ``ConfigError``     — missing secret, credential or tool; aborts the run
                        before any unit is processed.
- ``DiscoveryError``  — a solution or project cannot be read, or no target
                        framework resolves; fatal for that solution/unit only.
- ``StageFailure``    — an external tool returned a disallowed exit code;
                        fatal for the unit's remaining stages, not the run.
- ``FanOutFailure``   — a publish destination rejected delivery; collected
                        and reported at the end of the run.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from slipway.models.stages import StageOutcome


class SlipwayError(RuntimeError):
    """Base class for all orchestrator errors."""


class ConfigError(SlipwayError):
    """Raised when the run cannot start safely with the current configuration.

    This error must not be caught and ignored — the process should exit.
    """


class DiscoveryError(SlipwayError):
    """Raised when a solution or project cannot be read or classified."""

    def __init__(
        self,
        message: str,
        *,
        solution_path: Path | None = None,
        project_path: Path | None = None,
        partial: bool = False,
    ) -> None:
        super().__init__(message)
        self.solution_path = solution_path
        self.project_path = project_path
        # True when the error aborted discovery of a whole solution
        self.partial = partial


class PropertyReaderError(DiscoveryError):
    """Raised when the property reader cannot open a project or solution file."""


class VersionRangeError(SlipwayError, ValueError):
    """Raised when a timestamp or field falls outside the encodable range."""


class StageFailure(SlipwayError):
    """Raised when a stage's external tool exits with a disallowed code."""

    def __init__(self, outcome: StageOutcome) -> None:
        super().__init__(
            f"{outcome.stage.value} failed for {outcome.unit.project_name} "
            f"(exit code {outcome.exit_code})"
        )
        self.outcome = outcome


class FanOutFailure(SlipwayError):
    """Raised when a publish destination rejects an artifact."""

    def __init__(self, target_name: str, message: str) -> None:
        super().__init__(f"{target_name}: {message}")
        self.target_name = target_name


class InvalidTransitionError(SlipwayError):
    """Raised when a requested unit state transition is not valid."""
