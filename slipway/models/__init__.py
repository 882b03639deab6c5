"""Slipway data models — all Pydantic v2, all frozen (immutable)."""

from slipway.models.context import RunContext, RunReport
from slipway.models.deployment import (
    RECOGNIZED_CHANNELS,
    Affix,
    BranchIdentity,
    DeploymentChannel,
    DeploymentInfo,
)
from slipway.models.publishing import (
    FanOutOutcome,
    PublishPlan,
    PublishTarget,
    PublishTargetKind,
)
from slipway.models.stages import (
    STAGE_SEQUENCE,
    TERMINAL_STATES,
    VALID_UNIT_TRANSITIONS,
    Stage,
    StageOutcome,
    StageStep,
    UnitState,
    UnitTransition,
)
from slipway.models.units import (
    BuildTool,
    BuildUnit,
    PropertyKind,
    PropertyScope,
    PropertyValue,
    TargetFrameworkKind,
    TargetKind,
    ToolchainSelection,
)
from slipway.models.versioning import Version

__all__ = [
    # versioning
    "Version",
    # deployment
    "DeploymentChannel",
    "RECOGNIZED_CHANNELS",
    "BranchIdentity",
    "Affix",
    "DeploymentInfo",
    # units
    "BuildUnit",
    "BuildTool",
    "TargetKind",
    "TargetFrameworkKind",
    "ToolchainSelection",
    "PropertyScope",
    "PropertyKind",
    "PropertyValue",
    # stages
    "Stage",
    "UnitState",
    "StageStep",
    "StageOutcome",
    "UnitTransition",
    "STAGE_SEQUENCE",
    "TERMINAL_STATES",
    "VALID_UNIT_TRANSITIONS",
    # publishing
    "PublishTargetKind",
    "PublishTarget",
    "PublishPlan",
    "FanOutOutcome",
    # context
    "RunContext",
    "RunReport",
]
