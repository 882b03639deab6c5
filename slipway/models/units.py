"""Build unit and toolchain models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class TargetKind(str, Enum):
    """Project file convention."""

    SDK_STYLE = "sdk_style"
    LEGACY_STYLE = "legacy_style"


class BuildTool(str, Enum):
    MODERN_SDK_BUILDER = "modern_sdk_builder"
    LEGACY_MSBUILD_TOOL = "legacy_msbuild_tool"


class TargetFrameworkKind(str, Enum):
    FRAMEWORK = "framework"
    CORE = "core"


class BuildUnit(BaseModel):
    """One project together with its owning solution.

    Discovery fills the paths, ``source_root`` and ``is_test_project``.  The
    remaining classification fields stay ``None`` until the unit inspector
    resolves them from the property reader; resolution returns a new
    instance.

    Units are identified by the solution's location below the source root
    plus the project name, so equally named solutions in different folders
    stay apart.  Project names are unique within a solution.
    """

    model_config = ConfigDict(frozen=True)

    solution_path: Path
    project_path: Path
    source_root: Path | None = None
    is_test_project: bool = False
    is_packable: bool | None = None
    is_publishable: bool | None = None
    target_kind: TargetKind | None = None
    target_frameworks: frozenset[str] = frozenset()

    @property
    def solution_name(self) -> str:
        return self.solution_path.stem

    @property
    def project_name(self) -> str:
        return self.project_path.stem

    @property
    def layout(self) -> Path:
        """Relative directory for this unit: ``<solution dir>/<solution>/<project>``."""
        solution = Path(self.solution_path.name)
        if self.source_root is not None and self.solution_path.is_relative_to(self.source_root):
            solution = self.solution_path.relative_to(self.source_root)
        return solution.with_suffix("") / self.project_name

    @property
    def key(self) -> str:
        """``solution/project``, prefixed by the solution's folder; unique within a run."""
        return self.layout.as_posix()

    @property
    def is_resolved(self) -> bool:
        return (
            self.is_packable is not None
            and self.is_publishable is not None
            and self.target_kind is not None
        )


class ToolchainSelection(BaseModel):
    """Which build tool a unit needs, and why."""

    model_config = ConfigDict(frozen=True)

    tool: BuildTool
    framework_kind: TargetFrameworkKind
    target_kind: TargetKind
    target_frameworks: frozenset[str]
    source_property: str  # the property that resolved the frameworks


class PropertyScope(str, Enum):
    """``inner`` returns the element text, ``outer`` the whole element."""

    INNER = "inner"
    OUTER = "outer"


class PropertyKind(str, Enum):
    ABSENT = "absent"
    EMPTY = "empty"
    VALUE = "value"


class PropertyValue(BaseModel):
    """Tagged result of a property lookup.

    Keeps "not declared" apart from "declared but empty"; an unreadable file
    is neither and surfaces as ``PropertyReaderError``.
    """

    model_config = ConfigDict(frozen=True)

    kind: PropertyKind
    value: str | None = None

    @classmethod
    def absent(cls) -> PropertyValue:
        return cls(kind=PropertyKind.ABSENT)

    @classmethod
    def empty(cls) -> PropertyValue:
        return cls(kind=PropertyKind.EMPTY, value="")

    @classmethod
    def of(cls, value: str) -> PropertyValue:
        """Build from raw text; whitespace-only text is Empty."""
        if not value.strip():
            return cls.empty()
        return cls(kind=PropertyKind.VALUE, value=value.strip())

    @property
    def is_value(self) -> bool:
        return self.kind == PropertyKind.VALUE

    def as_bool(self, default: bool = False) -> bool:
        """Interpret an MSBuild boolean (``true``/``false``, case-insensitive)."""
        if not self.is_value:
            return default
        return (self.value or "").lower() == "true"
