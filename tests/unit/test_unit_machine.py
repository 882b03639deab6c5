"""Tests for the per-unit state machine."""

from __future__ import annotations

import pytest

from slipway.core.outcome_log import OutcomeLog
from slipway.core.unit_machine import UnitStateMachine
from slipway.errors import InvalidTransitionError
from slipway.models.stages import STAGE_SEQUENCE, Stage, StageOutcome, UnitState


@pytest.fixture
def machine() -> UnitStateMachine:
    return UnitStateMachine()


class TestUnitStateMachine:
    def test_register(self, machine, make_unit):
        unit = make_unit()
        assert machine.register(unit) == UnitState.DISCOVERED
        assert machine.state_of(unit) == UnitState.DISCOVERED

    def test_full_sequence(self, machine, make_unit):
        unit = make_unit()
        machine.register(unit)
        for step in STAGE_SEQUENCE:
            machine.transition(unit, step.state)
        machine.transition(unit, UnitState.DONE)
        assert machine.is_terminal(unit)
        assert [t.to_state for t in machine.transitions][:4] == [
            UnitState.RESTORING, UnitState.CLEANING, UnitState.RESTORED2, UnitState.BUILDING,
        ]

    def test_optional_states_can_be_skipped(self, machine, make_unit):
        unit = make_unit()
        machine.register(unit)
        for state in (UnitState.RESTORING, UnitState.CLEANING, UnitState.RESTORED2,
                      UnitState.BUILDING, UnitState.PUBLISHING, UnitState.DONE):
            machine.transition(unit, state)
        assert machine.state_of(unit) == UnitState.DONE

    def test_cannot_skip_build(self, machine, make_unit):
        unit = make_unit()
        machine.register(unit)
        with pytest.raises(InvalidTransitionError):
            machine.transition(unit, UnitState.BUILDING)

    def test_cannot_go_backwards(self, machine, make_unit):
        unit = make_unit()
        machine.register(unit)
        machine.transition(unit, UnitState.RESTORING)
        machine.transition(unit, UnitState.CLEANING)
        with pytest.raises(InvalidTransitionError):
            machine.transition(unit, UnitState.RESTORING)

    def test_test_failure_is_not_terminal(self, machine, make_unit):
        unit = make_unit()
        machine.register(unit)
        for state in (UnitState.RESTORING, UnitState.CLEANING, UnitState.RESTORED2,
                      UnitState.BUILDING, UnitState.TESTING):
            machine.transition(unit, state)
        with pytest.raises(InvalidTransitionError):
            machine.transition(unit, UnitState.FAILED)

    @pytest.mark.parametrize("terminal", [UnitState.DONE, UnitState.FAILED])
    def test_terminal_states_are_final(self, machine, make_unit, terminal):
        unit = make_unit()
        machine.register(unit)
        if terminal == UnitState.DONE:
            for state in (UnitState.RESTORING, UnitState.CLEANING,
                          UnitState.RESTORED2, UnitState.BUILDING):
                machine.transition(unit, state)
        machine.transition(unit, terminal)
        with pytest.raises(InvalidTransitionError):
            machine.transition(unit, UnitState.RESTORING)

    def test_units_are_independent(self, machine, make_unit):
        first, second = make_unit("A"), make_unit("B")
        machine.register(first)
        machine.register(second)
        machine.transition(first, UnitState.FAILED, reason="no toolchain")
        assert machine.state_of(second) == UnitState.DISCOVERED
        assert machine.all_states() == {
            first.key: UnitState.FAILED, second.key: UnitState.DISCOVERED,
        }
        assert machine.transitions[-1].reason == "no toolchain"


class TestOutcomeLog:
    def test_append_only_views(self, make_unit):
        log = OutcomeLog()
        a, b = make_unit("A"), make_unit("B")
        log.append(StageOutcome(unit=a, stage=Stage.RESTORE, succeeded=True, exit_code=0))
        log.append(StageOutcome(unit=b, stage=Stage.RESTORE, succeeded=True, exit_code=0))
        log.append(StageOutcome(unit=a, stage=Stage.BUILD, succeeded=False, exit_code=1))

        assert len(log) == 3
        assert [o.stage for o in log.for_unit(a)] == [Stage.RESTORE, Stage.BUILD]
        assert len(log.for_stage(Stage.RESTORE)) == 2
        assert [o.unit.key for o in log.failures()] == [a.key]

        entries = log.entries()
        entries.clear()
        assert len(list(log)) == 3
