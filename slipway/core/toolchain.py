"""Per-unit toolchain selection.

Precedence, first resolving property wins:

1. ``TargetFrameworkVersion`` (legacy project, e.g. ``v4.7.2``) — the unit is
   legacy-style; the tool follows the moniker-set test on that one moniker.
2. ``TargetFramework`` — SDK-style, same single-moniker test.
3. ``TargetFrameworks`` — SDK-style multi-targeting; if *any* member is a
   legacy moniker the legacy tool is required, because the modern build
   driver cannot target those frameworks.

Nothing resolving is a ``DiscoveryError``; there is no silent default.
"""

from __future__ import annotations

import logging

from slipway.errors import DiscoveryError
from slipway.models.units import (
    BuildTool,
    BuildUnit,
    PropertyScope,
    TargetFrameworkKind,
    TargetKind,
    ToolchainSelection,
)
from slipway.readers import PropertyReader

logger = logging.getLogger(__name__)

LEGACY_FRAMEWORK_MONIKERS: frozenset[str] = frozenset({
    "net20", "net35", "net40", "net403",
    "net45", "net451", "net452",
    "net46", "net461", "net462",
    "net47", "net471", "net472",
    "net48", "net481",
})

LEGACY_PROPERTY = "TargetFrameworkVersion"
SINGLE_PROPERTY = "TargetFramework"
MULTI_PROPERTY = "TargetFrameworks"
LIST_SEPARATOR = ";"


def normalize_moniker(value: str) -> str:
    """Lower-case a moniker; ``v4.7.2``-style versions become ``net472``."""
    moniker = value.strip().lower()
    if moniker.startswith("v") and moniker[1:2].isdigit():
        moniker = "net" + moniker[1:].replace(".", "")
    return moniker


def is_legacy_moniker(moniker: str) -> bool:
    return normalize_moniker(moniker) in LEGACY_FRAMEWORK_MONIKERS


def tool_for(monikers: frozenset[str]) -> BuildTool:
    if any(m in LEGACY_FRAMEWORK_MONIKERS for m in monikers):
        return BuildTool.LEGACY_MSBUILD_TOOL
    return BuildTool.MODERN_SDK_BUILDER


class ToolchainSelector:
    """Decides which build tool a unit needs from its declared frameworks."""

    def __init__(self, reader: PropertyReader) -> None:
        self._reader = reader

    def select(self, unit: BuildUnit) -> ToolchainSelection:
        """Classify *unit*.  Deterministic for a given set of declared properties."""
        project = unit.project_path

        legacy = self._reader.get_property(project, LEGACY_PROPERTY, PropertyScope.INNER)
        if legacy.is_value:
            return self._selection(
                unit, TargetKind.LEGACY_STYLE, [legacy.value or ""], LEGACY_PROPERTY
            )

        single = self._reader.get_property(project, SINGLE_PROPERTY, PropertyScope.INNER)
        if single.is_value:
            return self._selection(
                unit, TargetKind.SDK_STYLE, [single.value or ""], SINGLE_PROPERTY
            )

        multi = self._reader.get_property(project, MULTI_PROPERTY, PropertyScope.INNER)
        if multi.is_value:
            members = [m for m in (multi.value or "").split(LIST_SEPARATOR) if m.strip()]
            if members:
                return self._selection(unit, TargetKind.SDK_STYLE, members, MULTI_PROPERTY)

        raise DiscoveryError(
            f"No target framework resolves for {project.name}: "
            f"{LEGACY_PROPERTY}={legacy.kind.value}, "
            f"{SINGLE_PROPERTY}={single.kind.value}, "
            f"{MULTI_PROPERTY}={multi.kind.value}",
            solution_path=unit.solution_path,
            project_path=project,
        )

    @staticmethod
    def _selection(
        unit: BuildUnit, kind: TargetKind, raw: list[str], source: str
    ) -> ToolchainSelection:
        monikers = frozenset(normalize_moniker(m) for m in raw)
        tool = tool_for(monikers)
        framework_kind = (
            TargetFrameworkKind.FRAMEWORK
            if tool == BuildTool.LEGACY_MSBUILD_TOOL
            else TargetFrameworkKind.CORE
        )
        logger.info(
            "%s: %s [%s] -> %s",
            unit.project_name,
            source,
            ", ".join(sorted(monikers)),
            tool.value,
        )
        return ToolchainSelection(
            tool=tool,
            framework_kind=framework_kind,
            target_kind=kind,
            target_frameworks=monikers,
            source_property=source,
        )
