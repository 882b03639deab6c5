"""Property reader boundary — project/solution metadata lookups.

A reader answers four questions about MSBuild files and must keep three
outcomes apart: a property that is not declared (``PropertyValue.absent()``),
one declared empty (``PropertyValue.empty()``), and a file that cannot be
read (``PropertyReaderError``).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from slipway.models.units import PropertyScope, PropertyValue

if TYPE_CHECKING:
    from slipway.config import SlipwaySettings
    from slipway.core.process import ProcessRunner


@runtime_checkable
class PropertyReader(Protocol):
    """Protocol every property reader implements."""

    def get_property(
        self,
        project_path: Path,
        property_name: str,
        scope: PropertyScope = PropertyScope.INNER,
    ) -> PropertyValue:
        """Read one property from a project file."""
        ...

    def get_project_paths_from_solution(self, solution_path: Path) -> list[Path]:
        """Return MSBuild-format member projects in solution file order."""
        ...

    def get_project_sdk(self, project_path: Path) -> PropertyValue:
        """Return the project's SDK reference (absent for legacy projects)."""
        ...

    def get_package_references(self, project_path: Path) -> list[str]:
        """Return the ``Include`` of every ``PackageReference``, in document order."""
        ...


def create_property_reader(
    settings: SlipwaySettings, runner: ProcessRunner
) -> PropertyReader:
    """Build the reader selected by ``settings.property_reader``."""
    from slipway.errors import ConfigError
    from slipway.readers.drydock import DrydockPropertyReader
    from slipway.readers.xml_reader import XmlPropertyReader

    kind = settings.property_reader.lower()
    if kind == "xml":
        return XmlPropertyReader()
    if kind == "drydock":
        return DrydockPropertyReader(runner, tool=settings.drydock_tool)
    raise ConfigError(
        f"Unknown property reader {settings.property_reader!r}. "
        "Set SLIPWAY_PROPERTY_READER to 'xml' or 'drydock'."
    )


__all__ = ["PropertyReader", "create_property_reader"]
