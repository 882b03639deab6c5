"""Project discovery and lazy unit classification.

Discovery enumerates every solution under the source root (sorted path
order), asks the property reader for each solution's MSBuild members in file
order, concatenates them, and stable-partitions the result: test projects
first, everything else after, each group keeping discovery order.  CI gets
test signal before any time is spent on packaging.

A project is a test project when it declares ``IsTestProject`` true or
references the ``Microsoft.NET.Test.Sdk`` package (compared
case-insensitively); test frameworks usually set the property implicitly
through that package.
"""

from __future__ import annotations

import logging
from pathlib import Path

from slipway.core.toolchain import ToolchainSelector
from slipway.errors import DiscoveryError
from slipway.models.units import BuildUnit, PropertyScope, TargetKind, ToolchainSelection
from slipway.readers import PropertyReader

logger = logging.getLogger(__name__)

SOLUTION_PATTERNS: tuple[str, ...] = ("*.sln", "*.slnx")
TEST_SDK_PACKAGE = "Microsoft.NET.Test.Sdk"


def is_test_project(reader: PropertyReader, project_path: Path) -> bool:
    """Declared ``IsTestProject`` or a ``Microsoft.NET.Test.Sdk`` package reference."""
    if reader.get_property(project_path, "IsTestProject", PropertyScope.INNER).as_bool():
        return True
    wanted = TEST_SDK_PACKAGE.casefold()
    return any(ref.casefold() == wanted for ref in reader.get_package_references(project_path))


def stable_partition(units: list[BuildUnit]) -> list[BuildUnit]:
    """Test units first, others after; relative order preserved in both groups."""
    tests = [u for u in units if u.is_test_project]
    others = [u for u in units if not u.is_test_project]
    return tests + others


class ProjectDiscovery:
    """Enumerates build units from a repository checkout.

    Parameters
    ----------
    reader:
        Property reader used for solution membership and the test flag.
    source_dir:
        Directory (relative to the repository root) holding the solutions.
    """

    def __init__(self, reader: PropertyReader, source_dir: Path = Path("source")) -> None:
        self._reader = reader
        self._source_dir = source_dir

    def source_root(self, repo_root: Path) -> Path:
        return self._source_dir if self._source_dir.is_absolute() else repo_root / self._source_dir

    def find_solutions(self, repo_root: Path) -> list[Path]:
        """Every solution file under the source root, in sorted path order."""
        root = self.source_root(repo_root)
        if not root.is_dir():
            logger.warning("Source root does not exist: %s", root)
            return []
        found = {p for pattern in SOLUTION_PATTERNS for p in root.rglob(pattern)}
        return sorted(found)

    def discover(self, repo_root: Path) -> list[BuildUnit]:
        """Ordered build units; a solution that fails to open raises.

        Restartable: each call re-reads the tree and returns a fresh list.
        """
        root = self.source_root(repo_root)
        units: list[BuildUnit] = []
        for solution in self.find_solutions(repo_root):
            units.extend(self.discover_solution(solution, root))
        return stable_partition(units)

    def discover_partial(
        self, repo_root: Path
    ) -> tuple[list[BuildUnit], list[DiscoveryError]]:
        """Like ``discover`` but collects per-solution failures.

        A failing solution contributes no units at all; the remaining
        solutions are still discovered.
        """
        units: list[BuildUnit] = []
        errors: list[DiscoveryError] = []
        root = self.source_root(repo_root)
        for solution in self.find_solutions(repo_root):
            try:
                units.extend(self.discover_solution(solution, root))
            except DiscoveryError as exc:
                logger.error("Discovery aborted for %s: %s", solution, exc)
                errors.append(exc)
        return stable_partition(units), errors

    def discover_solution(
        self, solution_path: Path, source_root: Path | None = None
    ) -> list[BuildUnit]:
        """Units of one solution in member order (not yet partitioned)."""
        try:
            members = self._reader.get_project_paths_from_solution(solution_path)
            units = [
                BuildUnit(
                    solution_path=solution_path,
                    project_path=project,
                    source_root=source_root,
                    is_test_project=is_test_project(self._reader, project),
                )
                for project in members
            ]
        except DiscoveryError as exc:
            raise DiscoveryError(
                f"Solution {solution_path.name}: {exc}",
                solution_path=solution_path,
                project_path=exc.project_path,
                partial=True,
            ) from exc

        logger.info(
            "Found %d project(s) in %s (%d test)",
            len(units),
            solution_path.name,
            sum(u.is_test_project for u in units),
        )
        return units


class UnitInspector:
    """Resolves a unit's remaining flags and toolchain on first use, then caches.

    The cache lives as long as the inspector, i.e. one run.
    """

    def __init__(self, reader: PropertyReader, selector: ToolchainSelector) -> None:
        self._reader = reader
        self._selector = selector
        self._cache: dict[tuple[Path, Path], tuple[BuildUnit, ToolchainSelection]] = {}

    def inspect(self, unit: BuildUnit) -> tuple[BuildUnit, ToolchainSelection]:
        """Return the fully classified unit and its toolchain selection.

        Raises ``DiscoveryError`` when no target framework resolves.
        """
        key = (unit.solution_path, unit.project_path)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        selection = self._selector.select(unit)
        resolved = unit.model_copy(
            update={
                "is_packable": self._flag(
                    unit, "IsPackable", default=self._packable_by_default(unit, selection)
                ),
                "is_publishable": self._flag(unit, "IsPublishable"),
                "target_kind": selection.target_kind,
                "target_frameworks": selection.target_frameworks,
            }
        )
        self._cache[key] = (resolved, selection)
        return resolved, selection

    def resolve(self, unit: BuildUnit) -> BuildUnit:
        return self.inspect(unit)[0]

    def _flag(self, unit: BuildUnit, name: str, default: bool = False) -> bool:
        return self._reader.get_property(unit.project_path, name).as_bool(default=default)

    @staticmethod
    def _packable_by_default(unit: BuildUnit, selection: ToolchainSelection) -> bool:
        # The .NET SDK packs every non-test project unless IsPackable says otherwise.
        # Legacy projects have no pack target by default; publishing stays opt-in.
        return selection.target_kind == TargetKind.SDK_STYLE and not unit.is_test_project
