"""In-process property reader for ``.sln``/``.slnx`` and MSBuild project XML.

Reads the declared (unevaluated) project XML, the same view the drydock
CLI exposes: property lookup is case-insensitive and returns the first
declaration in document order; imports and conditions are not evaluated.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path, PureWindowsPath

from slipway.errors import PropertyReaderError
from slipway.models.units import PropertyScope, PropertyValue

logger = logging.getLogger(__name__)

MSBUILD_PROJECT_SUFFIXES: frozenset[str] = frozenset(
    {".csproj", ".vbproj", ".fsproj", ".proj"}
)

SOLUTION_FOLDER_TYPE = "2150E333-8FDC-42A3-9474-1A3956D46DE8"

# Project("{TYPE-GUID}") = "Name", "relative\path.csproj", "{PROJECT-GUID}"
_SLN_PROJECT_LINE = re.compile(
    r'^Project\("\{(?P<type>[0-9A-Fa-f-]+)\}"\)\s*=\s*'
    r'"(?P<name>[^"]*)"\s*,\s*"(?P<path>[^"]*)"',
)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _relative_member(solution_path: Path, raw: str) -> Path:
    # Solution files store Windows-style relative paths.
    return (solution_path.parent / Path(*PureWindowsPath(raw).parts)).resolve()


def read_package_references(project_path: Path) -> list[str]:
    """``Include`` values of every ``ItemGroup/PackageReference`` in *project_path*."""
    root = XmlPropertyReader._load(project_path)
    return [
        item.get("Include", "").strip()
        for group in root.iter()
        if _local_name(group.tag) == "ItemGroup"
        for item in group
        if _local_name(item.tag) == "PackageReference" and item.get("Include", "").strip()
    ]


class XmlPropertyReader:
    """Reads solution membership and project properties without MSBuild."""

    def get_project_paths_from_solution(self, solution_path: Path) -> list[Path]:
        try:
            text = solution_path.read_text(encoding="utf-8-sig")
        except OSError as exc:
            raise PropertyReaderError(
                f"Cannot read solution {solution_path}: {exc}",
                solution_path=solution_path,
            ) from exc

        if solution_path.suffix.lower() == ".slnx":
            members = self._slnx_members(solution_path, text)
        else:
            members = self._sln_members(solution_path, text)

        projects = [p for p in members if p.suffix.lower() in MSBUILD_PROJECT_SUFFIXES]
        skipped = len(members) - len(projects)
        if skipped:
            logger.debug("%s: skipped %d non-MSBuild members", solution_path.name, skipped)
        if not projects:
            logger.warning("No project files were found in the solution: %s", solution_path)
        return projects

    def get_property(
        self,
        project_path: Path,
        property_name: str,
        scope: PropertyScope = PropertyScope.INNER,
    ) -> PropertyValue:
        root = self._load(project_path)
        wanted = property_name.lower()
        for group in root.iter():
            if _local_name(group.tag) != "PropertyGroup":
                continue
            for prop in group:
                if _local_name(prop.tag).lower() != wanted:
                    continue
                if scope == PropertyScope.OUTER:
                    prop_copy = ET.fromstring(ET.tostring(prop))
                    prop_copy.tail = None
                    return PropertyValue.of(ET.tostring(prop_copy, encoding="unicode"))
                return PropertyValue.of(prop.text or "")
        return PropertyValue.absent()

    def get_project_sdk(self, project_path: Path) -> PropertyValue:
        root = self._load(project_path)
        sdk = root.get("Sdk")
        if sdk is not None:
            return PropertyValue.of(sdk)
        for child in root:
            if _local_name(child.tag) == "Sdk" and child.get("Name"):
                return PropertyValue.of(child.get("Name", ""))
        return PropertyValue.absent()

    def get_package_references(self, project_path: Path) -> list[str]:
        return read_package_references(project_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _load(project_path: Path) -> ET.Element:
        try:
            return ET.parse(project_path).getroot()
        except (OSError, ET.ParseError) as exc:
            raise PropertyReaderError(
                f"Failed to open project file {project_path}: {exc}",
                project_path=project_path,
            ) from exc

    @staticmethod
    def _sln_members(solution_path: Path, text: str) -> list[Path]:
        members: list[Path] = []
        for line in text.splitlines():
            match = _SLN_PROJECT_LINE.match(line.strip())
            if match is None:
                continue
            if match.group("type").upper() == SOLUTION_FOLDER_TYPE:
                continue
            members.append(_relative_member(solution_path, match.group("path")))
        return members

    @staticmethod
    def _slnx_members(solution_path: Path, text: str) -> list[Path]:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise PropertyReaderError(
                f"Cannot parse solution {solution_path}: {exc}",
                solution_path=solution_path,
            ) from exc
        return [
            _relative_member(solution_path, el.get("Path", ""))
            for el in root.iter()
            if _local_name(el.tag) == "Project" and el.get("Path")
        ]
