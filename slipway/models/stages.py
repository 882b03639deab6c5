"""Per-unit stage sequence and state machine models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from slipway.models.units import BuildUnit


class Stage(str, Enum):
    """External-tool stages a unit can run."""

    RESTORE = "restore"
    CLEAN = "clean"
    BUILD = "build"
    TEST = "test"
    PACK = "pack"
    PUBLISH = "publish"
    DOCS = "docs"


class UnitState(str, Enum):
    """Strict lifecycle for each build unit."""

    DISCOVERED = "discovered"
    RESTORING = "restoring"
    CLEANING = "cleaning"
    RESTORED2 = "restored2"  # second restore after clean
    BUILDING = "building"
    TESTING = "testing"
    PACKING = "packing"
    PUBLISHING = "publishing"
    DOCS_GENERATING = "docs_generating"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES: frozenset[UnitState] = frozenset({UnitState.DONE, UnitState.FAILED})

# Strictly sequential; optional states may be skipped forward.
# Terminal states (DONE, FAILED) have no outgoing transitions.
VALID_UNIT_TRANSITIONS: dict[UnitState, set[UnitState]] = {
    UnitState.DISCOVERED: {UnitState.RESTORING, UnitState.FAILED},
    UnitState.RESTORING: {UnitState.CLEANING, UnitState.FAILED},
    UnitState.CLEANING: {UnitState.RESTORED2, UnitState.FAILED},
    UnitState.RESTORED2: {UnitState.BUILDING, UnitState.FAILED},
    UnitState.BUILDING: {
        UnitState.TESTING,
        UnitState.PACKING,
        UnitState.PUBLISHING,
        UnitState.DOCS_GENERATING,
        UnitState.DONE,
        UnitState.FAILED,
    },
    UnitState.TESTING: {
        UnitState.PACKING,
        UnitState.PUBLISHING,
        UnitState.DOCS_GENERATING,
        UnitState.DONE,
    },
    UnitState.PACKING: {
        UnitState.PUBLISHING,
        UnitState.DOCS_GENERATING,
        UnitState.DONE,
        UnitState.FAILED,
    },
    UnitState.PUBLISHING: {UnitState.DOCS_GENERATING, UnitState.DONE, UnitState.FAILED},
    UnitState.DOCS_GENERATING: {UnitState.DONE, UnitState.FAILED},
    UnitState.DONE: set(),
    UnitState.FAILED: set(),
}


class StageStep(BaseModel):
    """One step of the per-unit sequence: the state entered and the stage run."""

    model_config = ConfigDict(frozen=True)

    state: UnitState
    stage: Stage
    fatal: bool  # failure ends the unit
    precondition: str | None = None  # BuildUnit flag (or setting) that gates the step


# restore -> clean -> restore -> build -> [test] -> [pack] -> [publish] -> [docs]
STAGE_SEQUENCE: tuple[StageStep, ...] = (
    StageStep(state=UnitState.RESTORING, stage=Stage.RESTORE, fatal=True),
    StageStep(state=UnitState.CLEANING, stage=Stage.CLEAN, fatal=True),
    StageStep(state=UnitState.RESTORED2, stage=Stage.RESTORE, fatal=True),
    StageStep(state=UnitState.BUILDING, stage=Stage.BUILD, fatal=True),
    StageStep(
        state=UnitState.TESTING, stage=Stage.TEST, fatal=False,
        precondition="is_test_project",
    ),
    StageStep(
        state=UnitState.PACKING, stage=Stage.PACK, fatal=True,
        precondition="is_packable",
    ),
    StageStep(
        state=UnitState.PUBLISHING, stage=Stage.PUBLISH, fatal=True,
        precondition="is_publishable",
    ),
    StageStep(
        state=UnitState.DOCS_GENERATING, stage=Stage.DOCS, fatal=True,
        precondition="docs_enabled",
    ),
)


class StageOutcome(BaseModel):
    """Result of one stage execution — appended to the run log, never mutated."""

    model_config = ConfigDict(frozen=True)

    unit: BuildUnit
    stage: Stage
    succeeded: bool
    exit_code: int
    message: str | None = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UnitTransition(BaseModel):
    """Records a single unit state transition."""

    model_config = ConfigDict(frozen=True)

    project_path: str
    from_state: UnitState
    to_state: UnitState
    reason: str | None = None
