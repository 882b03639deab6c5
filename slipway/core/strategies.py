"""Build strategies — the argument set each toolchain uses per stage.

Every invocation disables node reuse and the shared compiler server, and
writes into the unit's partitioned output directory.
"""

from __future__ import annotations

import abc
from pathlib import Path

from slipway.models.context import RunContext
from slipway.models.stages import Stage
from slipway.models.units import BuildTool, BuildUnit

_ISOLATION_ARGS: tuple[str, ...] = ("-nodeReuse:false", "-p:UseSharedCompilation=false")

STAGE_OUTPUT_DIRS: dict[Stage, str] = {
    Stage.BUILD: "build",
    Stage.TEST: "test",
    Stage.PACK: "pack",
    Stage.PUBLISH: "publish",
    Stage.DOCS: "docs",
}


def stage_output_dir(context: RunContext, unit: BuildUnit, stage: Stage) -> Path:
    return context.unit_output_dir(unit) / STAGE_OUTPUT_DIRS[stage]


def _dir_arg(path: Path) -> str:
    # MSBuild directory properties expect a trailing separator.
    return str(path).rstrip("/\\") + "/"


class BuildStrategy(abc.ABC):
    """Maps a stage to the argv that runs it for one unit."""

    tool: BuildTool

    def __init__(self, executable: str, docs_tool: str = "docfx") -> None:
        self.executable = executable
        self.docs_tool = docs_tool

    def command(self, stage: Stage, unit: BuildUnit, context: RunContext) -> list[str]:
        if stage == Stage.DOCS:
            return [
                self.docs_tool,
                "metadata",
                str(unit.project_path),
                "--output",
                str(stage_output_dir(context, unit, Stage.DOCS)),
            ]
        return self._command(stage, unit, context)

    @abc.abstractmethod
    def _command(self, stage: Stage, unit: BuildUnit, context: RunContext) -> list[str]:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} executable={self.executable!r}>"


class ModernSdkStrategy(BuildStrategy):
    """``dotnet <verb>`` for SDK-style projects on modern frameworks."""

    tool = BuildTool.MODERN_SDK_BUILDER

    def _command(self, stage: Stage, unit: BuildUnit, context: RunContext) -> list[str]:
        project = str(unit.project_path)
        config = ["-c", context.configuration]
        version = f"-p:Version={context.version.full}"

        if stage == Stage.RESTORE:
            return [self.executable, "restore", project, *_ISOLATION_ARGS]
        if stage == Stage.CLEAN:
            return [self.executable, "clean", project, *config, *_ISOLATION_ARGS]
        if stage == Stage.BUILD:
            return [
                self.executable, "build", project, *config, "--no-restore", version,
                "-o", str(stage_output_dir(context, unit, Stage.BUILD)),
                *_ISOLATION_ARGS,
            ]
        if stage == Stage.TEST:
            return [
                self.executable, "test", project, *config, "--no-restore",
                "--logger", "trx",
                "--results-directory", str(stage_output_dir(context, unit, Stage.TEST)),
                *_ISOLATION_ARGS,
            ]
        if stage == Stage.PACK:
            return [
                self.executable, "pack", project, *config, "--no-restore", version,
                f"-p:PackageVersion={context.package_version}",
                "-o", str(stage_output_dir(context, unit, Stage.PACK)),
                *_ISOLATION_ARGS,
            ]
        if stage == Stage.PUBLISH:
            return [
                self.executable, "publish", project, *config, "--no-restore", version,
                "-o", str(stage_output_dir(context, unit, Stage.PUBLISH)),
                *_ISOLATION_ARGS,
            ]
        raise ValueError(f"No dotnet command for stage {stage.value}")


class LegacyMsBuildStrategy(BuildStrategy):
    """``msbuild -t:<Target>`` for projects that target legacy frameworks."""

    tool = BuildTool.LEGACY_MSBUILD_TOOL

    _TARGETS: dict[Stage, str] = {
        Stage.RESTORE: "Restore",
        Stage.CLEAN: "Clean",
        Stage.BUILD: "Build",
        Stage.TEST: "VSTest",
        Stage.PACK: "Pack",
        Stage.PUBLISH: "Publish",
    }

    def _command(self, stage: Stage, unit: BuildUnit, context: RunContext) -> list[str]:
        if stage not in self._TARGETS:
            raise ValueError(f"No msbuild target for stage {stage.value}")

        argv = [
            self.executable,
            str(unit.project_path),
            f"-t:{self._TARGETS[stage]}",
            f"-p:Configuration={context.configuration}",
        ]
        if stage in (Stage.BUILD, Stage.PACK, Stage.PUBLISH):
            argv.append(f"-p:Version={context.version.full}")
        if stage == Stage.BUILD:
            argv.append(f"-p:OutDir={_dir_arg(stage_output_dir(context, unit, Stage.BUILD))}")
        elif stage == Stage.TEST:
            argv.append(
                f"-p:VSTestResultsDirectory={_dir_arg(stage_output_dir(context, unit, Stage.TEST))}"
            )
        elif stage == Stage.PACK:
            argv.append(f"-p:PackageVersion={context.package_version}")
            argv.append(
                f"-p:PackageOutputPath={_dir_arg(stage_output_dir(context, unit, Stage.PACK))}"
            )
        elif stage == Stage.PUBLISH:
            argv.append(
                f"-p:PublishDir={_dir_arg(stage_output_dir(context, unit, Stage.PUBLISH))}"
            )
        return [*argv, *_ISOLATION_ARGS]


def strategy_for(
    tool: BuildTool,
    *,
    dotnet_tool: str = "dotnet",
    msbuild_tool: str = "msbuild",
    docs_tool: str = "docfx",
) -> BuildStrategy:
    """Return the strategy implementing *tool*."""
    if tool == BuildTool.LEGACY_MSBUILD_TOOL:
        return LegacyMsBuildStrategy(msbuild_tool, docs_tool)
    return ModernSdkStrategy(dotnet_tool, docs_tool)
