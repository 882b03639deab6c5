"""Property reader backed by the drydock companion CLI.

Subcommands consumed::

    drydock sln --location <solution>
    drydock csproj --location <project> --property <name> --scope inner|outer
    drydock projtype --location <project> --return sdk

Exit code 0 means success with the answer on stdout, 14 means "property not
found" (not an error), anything else means the file could not be read.
"""

from __future__ import annotations

import logging
from pathlib import Path

from slipway.core.process import ProcessResult, ProcessRunner
from slipway.errors import PropertyReaderError
from slipway.models.units import PropertyScope, PropertyValue
from slipway.readers.xml_reader import read_package_references

logger = logging.getLogger(__name__)

EXIT_PROPERTY_NOT_FOUND = 14


class DrydockPropertyReader:
    """Reads MSBuild metadata by shelling out to ``drydock``.

    Parameters
    ----------
    runner:
        Process runner used for every lookup.
    tool:
        Executable name or path of the companion CLI.
    """

    def __init__(self, runner: ProcessRunner, tool: str = "drydock") -> None:
        self._runner = runner
        self._tool = tool

    def get_property(
        self,
        project_path: Path,
        property_name: str,
        scope: PropertyScope = PropertyScope.INNER,
    ) -> PropertyValue:
        result = self._query(
            "csproj",
            "--location", str(project_path),
            "--property", property_name,
            "--scope", scope.value,
        )
        return self._to_value(result, project_path, property_name)

    def get_project_sdk(self, project_path: Path) -> PropertyValue:
        result = self._query("projtype", "--location", str(project_path), "--return", "sdk")
        return self._to_value(result, project_path, "sdk")

    def get_project_paths_from_solution(self, solution_path: Path) -> list[Path]:
        result = self._query("sln", "--location", str(solution_path))
        if result.exit_code != 0:
            raise PropertyReaderError(
                f"drydock could not read solution {solution_path}: {result.tail(500)}",
                solution_path=solution_path,
            )
        paths = [Path(line.strip()) for line in result.stdout.splitlines() if line.strip()]
        return [p if p.is_absolute() else solution_path.parent / p for p in paths]

    def get_package_references(self, project_path: Path) -> list[str]:
        # drydock exposes properties only; item groups come from the project XML.
        return read_package_references(project_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _query(self, *args: str) -> ProcessResult:
        return self._runner.run(
            [self._tool, *args],
            allowed_exit_codes=(EXIT_PROPERTY_NOT_FOUND,),
        )

    @staticmethod
    def _to_value(result: ProcessResult, project_path: Path, name: str) -> PropertyValue:
        if result.exit_code == EXIT_PROPERTY_NOT_FOUND:
            logger.debug("%s: %s not declared", project_path.name, name)
            return PropertyValue.absent()
        if result.exit_code != 0:
            raise PropertyReaderError(
                f"drydock could not read {name} from {project_path} "
                f"(exit {result.exit_code}): {result.tail(500)}",
                project_path=project_path,
            )
        return PropertyValue.of(result.stdout)
