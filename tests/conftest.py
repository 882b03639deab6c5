"""Shared test fixtures for Slipway."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from slipway.config import SlipwaySettings
from slipway.core.process import ProcessResult
from slipway.core.run_context import build_run_context
from slipway.errors import PropertyReaderError
from slipway.models.context import RunContext
from slipway.models.units import BuildUnit, PropertyScope, PropertyValue

# 2024-01-01T00:00:00Z encodes to minor 406, revision 18434.
FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
FIXED_VERSION = "1.0.406.18434"


class FakePropertyReader:
    """Dictionary-backed property reader.

    ``properties`` maps a project path to ``{name: raw text}``; a missing
    name is Absent, whitespace-only text is Empty.  ``packages`` maps a
    project path to its package reference ids.  Paths listed in
    ``broken`` raise ``PropertyReaderError`` on any lookup.
    """

    def __init__(self) -> None:
        self.solutions: dict[Path, list[Path]] = {}
        self.properties: dict[Path, dict[str, str]] = {}
        self.sdks: dict[Path, str] = {}
        self.packages: dict[Path, list[str]] = {}
        self.broken: set[Path] = set()
        self.lookups: list[tuple[Path, str]] = []

    def add_solution(self, solution: Path, projects: Iterable[Path]) -> None:
        self.solutions[solution] = list(projects)

    def set_properties(self, project: Path, **props: str) -> None:
        self.properties.setdefault(project, {}).update(
            {name.lower(): value for name, value in props.items()}
        )

    def get_property(
        self,
        project_path: Path,
        property_name: str,
        scope: PropertyScope = PropertyScope.INNER,
    ) -> PropertyValue:
        self.lookups.append((project_path, property_name))
        if project_path in self.broken:
            raise PropertyReaderError(
                f"Failed to open project file {project_path}", project_path=project_path
            )
        props = self.properties.get(project_path, {})
        if property_name.lower() not in props:
            return PropertyValue.absent()
        return PropertyValue.of(props[property_name.lower()])

    def get_project_paths_from_solution(self, solution_path: Path) -> list[Path]:
        if solution_path in self.broken:
            raise PropertyReaderError(
                f"Cannot read solution {solution_path}", solution_path=solution_path
            )
        return list(self.solutions.get(solution_path, []))

    def get_project_sdk(self, project_path: Path) -> PropertyValue:
        if project_path in self.sdks:
            return PropertyValue.of(self.sdks[project_path])
        return PropertyValue.absent()

    def get_package_references(self, project_path: Path) -> list[str]:
        if project_path in self.broken:
            raise PropertyReaderError(
                f"Failed to open project file {project_path}", project_path=project_path
            )
        return list(self.packages.get(project_path, []))


class ScriptedRunner:
    """Process runner double that records argv and returns scripted results.

    Rules are matched in registration order; a rule matches when every one
    of its fragments is an element of the argv.  Unmatched commands exit 0.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self._rules: list[tuple[tuple[str, ...], int, str, str, Any]] = []

    def respond(
        self,
        *fragments: str,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
        effect: Callable[[list[str]], Any] | None = None,
    ) -> None:
        self._rules.append((fragments, exit_code, stdout, stderr, effect))

    def run(
        self,
        argv: Sequence[str],
        cwd: Path | None = None,
        allowed_exit_codes: Iterable[int] = (),
        timeout: float | None = None,
    ) -> ProcessResult:
        command = [str(a) for a in argv]
        self.calls.append(command)
        for fragments, exit_code, stdout, stderr, effect in self._rules:
            if all(f in command for f in fragments):
                if effect is not None:
                    effect(command)
                return ProcessResult(
                    argv=command,
                    exit_code=exit_code,
                    stdout=stdout,
                    stderr=stderr,
                    allowed=exit_code != 0 and exit_code in set(allowed_exit_codes),
                )
        return ProcessResult(argv=command, exit_code=0)

    def commands_with(self, *fragments: str) -> list[list[str]]:
        return [c for c in self.calls if all(f in c for f in fragments)]


def on_path(name: str) -> str | None:
    """``shutil.which`` stand-in: every tool is installed."""
    return f"/usr/bin/{name}"


@pytest.fixture
def fake_reader() -> FakePropertyReader:
    return FakePropertyReader()


@pytest.fixture
def scripted_runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def make_settings() -> Callable[..., SlipwaySettings]:
    """Factory fixture: settings isolated from any .env file."""

    def _factory(**overrides: Any) -> SlipwaySettings:
        values: dict[str, Any] = {"branch": "feature/login"}
        values.update(overrides)
        return SlipwaySettings(_env_file=None, **values)

    return _factory


@pytest.fixture
def settings(make_settings: Callable[..., SlipwaySettings]) -> SlipwaySettings:
    return make_settings()


@pytest.fixture
def make_context(
    tmp_path: Path, settings: SlipwaySettings
) -> Callable[..., RunContext]:
    """Factory fixture: a RunContext for a branch, rooted at tmp_path."""

    def _factory(branch: str = "feature/login", **overrides: Any) -> RunContext:
        run_settings = settings.model_copy(update=overrides) if overrides else settings
        return build_run_context(tmp_path, branch, run_settings, now=FIXED_NOW)

    return _factory


@pytest.fixture
def context(make_context: Callable[..., RunContext]) -> RunContext:
    return make_context()


@pytest.fixture
def make_unit(tmp_path: Path) -> Callable[..., BuildUnit]:
    """Factory fixture: a BuildUnit under tmp_path/source."""

    def _factory(
        project: str = "App",
        solution: str = "Main",
        **fields: Any,
    ) -> BuildUnit:
        source = tmp_path / "source"
        return BuildUnit(
            solution_path=source / f"{solution}.sln",
            project_path=source / project / f"{project}.csproj",
            **fields,
        )

    return _factory


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fixed_version() -> str:
    return FIXED_VERSION


@pytest.fixture
def which() -> Callable[[str], str | None]:
    return on_path
