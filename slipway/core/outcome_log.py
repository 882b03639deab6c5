"""Append-only, run-scoped log of stage outcomes.

One ``StageOutcome`` per stage execution, in execution order.  There is no
update or delete.
"""

from __future__ import annotations

from collections.abc import Iterator

from slipway.models.stages import Stage, StageOutcome
from slipway.models.units import BuildUnit


class OutcomeLog:
    """Ordered record of everything the run executed."""

    def __init__(self) -> None:
        self._entries: list[StageOutcome] = []

    def append(self, outcome: StageOutcome) -> StageOutcome:
        """Record *outcome*.  This is the ONLY write method."""
        self._entries.append(outcome)
        return outcome

    def entries(self) -> list[StageOutcome]:
        return list(self._entries)

    def for_unit(self, unit: BuildUnit) -> list[StageOutcome]:
        return [e for e in self._entries if e.unit.key == unit.key]

    def for_stage(self, stage: Stage) -> list[StageOutcome]:
        return [e for e in self._entries if e.stage == stage]

    def failures(self) -> list[StageOutcome]:
        return [e for e in self._entries if not e.succeeded]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StageOutcome]:
        return iter(list(self._entries))
