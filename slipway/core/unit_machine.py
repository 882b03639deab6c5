"""Deterministic per-unit state machine.

Enforces:
- Valid state transitions only (VALID_UNIT_TRANSITIONS table)
- Terminal states (DONE, FAILED) are final
- Every transition recorded, in order
"""

from __future__ import annotations

import logging

from slipway.errors import InvalidTransitionError
from slipway.models.stages import (
    TERMINAL_STATES,
    VALID_UNIT_TRANSITIONS,
    UnitState,
    UnitTransition,
)
from slipway.models.units import BuildUnit

logger = logging.getLogger(__name__)


class UnitStateMachine:
    """Tracks the lifecycle state of every unit in a run."""

    def __init__(self) -> None:
        self._states: dict[str, UnitState] = {}
        self._transitions: list[UnitTransition] = []

    # ------------------------------------------------------------------
    # State management
    # ------------------------------------------------------------------

    def register(self, unit: BuildUnit) -> UnitState:
        """Enter a newly discovered unit in DISCOVERED."""
        self._states[unit.key] = UnitState.DISCOVERED
        return UnitState.DISCOVERED

    def state_of(self, unit: BuildUnit) -> UnitState:
        return self._states.get(unit.key, UnitState.DISCOVERED)

    def all_states(self) -> dict[str, UnitState]:
        """Snapshot of every unit's state, in registration order."""
        return dict(self._states)

    @property
    def transitions(self) -> list[UnitTransition]:
        return list(self._transitions)

    def is_terminal(self, unit: BuildUnit) -> bool:
        return self.state_of(unit) in TERMINAL_STATES

    # ------------------------------------------------------------------
    # Transition logic
    # ------------------------------------------------------------------

    def transition(
        self, unit: BuildUnit, target: UnitState, *, reason: str | None = None
    ) -> UnitTransition:
        """Move *unit* to *target*, raising ``InvalidTransitionError`` if not allowed."""
        current = self.state_of(unit)
        allowed = VALID_UNIT_TRANSITIONS.get(current, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {unit.key} from {current.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        record = UnitTransition(
            project_path=str(unit.project_path),
            from_state=current,
            to_state=target,
            reason=reason,
        )
        self._transitions.append(record)
        self._states[unit.key] = target
        logger.debug("%s: %s -> %s", unit.key, current.value, target.value)
        return record
