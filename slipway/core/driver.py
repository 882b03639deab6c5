"""Pipeline driver — sequences identity, discovery, per-unit stages and fan-out.

Control flow for one run:

1. Resolve the branch, classify it, encode the version -> ``RunContext``.
2. Consult ``PublishPolicy`` once for the run's plan; the release guard
   validates tools and credentials before any unit runs (``ConfigError``).
3. Discover units (test projects first), resolve their toolchains and
   require msbuild when a legacy unit needs it (``ConfigError``).
4. For each unit, strictly in order: select the toolchain, then run
   restore -> clean -> restore -> build -> [test] -> [pack] -> [publish] -> [docs].
   Restore, clean and build failures end the unit; a test failure is recorded
   but pack and publish still run.  The driver moves on to the next unit
   unless fail-fast is configured.
5. Fan out the artifacts of every unit that reached DONE.

The exit code is non-zero iff a config error, a discovery failure, a fatal
unit failure or a fan-out failure occurred.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from slipway.config import SlipwaySettings
from slipway.core.discovery import ProjectDiscovery, UnitInspector
from slipway.core.outcome_log import OutcomeLog
from slipway.core.process import ProcessRunner
from slipway.core.publish_policy import PublishPolicy
from slipway.core.release_guard import enforce_build_tools, enforce_release_constraints
from slipway.core.run_context import build_run_context, resolve_branch_name
from slipway.core.strategies import BuildStrategy, strategy_for
from slipway.core.toolchain import ToolchainSelector
from slipway.core.unit_machine import UnitStateMachine
from slipway.errors import ConfigError, DiscoveryError, StageFailure
from slipway.fanout import FanOutDispatcher, collect_artifacts
from slipway.fanout.destinations import build_destinations
from slipway.models.context import RunContext, RunReport
from slipway.models.publishing import FanOutOutcome, PublishPlan
from slipway.models.stages import STAGE_SEQUENCE, Stage, StageOutcome, StageStep, UnitState
from slipway.models.units import BuildUnit
from slipway.readers import PropertyReader, create_property_reader

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


class PipelineDriver:
    """Runs the whole build-and-release pipeline for one checkout.

    Parameters
    ----------
    settings:
        Orchestrator settings.  Read from the environment if not provided.
    reader:
        Property reader.  Built from ``settings.property_reader`` if not provided.
    runner:
        External process runner shared by every stage and property lookup.
    policy:
        Publish policy.  Built from settings for the repository if not provided.
    which:
        PATH lookup used by the release guard.
    """

    def __init__(
        self,
        settings: SlipwaySettings | None = None,
        *,
        reader: PropertyReader | None = None,
        runner: ProcessRunner | None = None,
        policy: PublishPolicy | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.settings = settings or SlipwaySettings()
        self.runner = runner or ProcessRunner(timeout=self.settings.stage_timeout_seconds)
        self.reader = reader or create_property_reader(self.settings, self.runner)
        self.selector = ToolchainSelector(self.reader)
        self.discovery = ProjectDiscovery(self.reader, self.settings.source_dir)
        self._policy = policy
        self._which = which

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def run(
        self,
        repo_root: Path,
        branch: str | None = None,
        *,
        now: datetime | None = None,
    ) -> RunReport:
        """Execute one complete run and return its report."""
        try:
            context, plan = self.prepare(repo_root, branch, now=now)
        except ConfigError as exc:
            logger.critical("Run aborted before any unit ran: %s", exc)
            return RunReport(config_error=str(exc), exit_code=EXIT_CONFIG_ERROR)

        units, discovery_errors = self.discovery.discover_partial(repo_root)
        machine = UnitStateMachine()
        log = OutcomeLog()
        inspector = UnitInspector(self.reader, self.selector)
        for unit in units:
            machine.register(unit)

        try:
            self.check_build_tools(units, inspector)
        except ConfigError as exc:
            logger.critical("Run aborted before any unit ran: %s", exc)
            return RunReport(
                context=context,
                unit_states=machine.all_states(),
                discovery_errors=[str(e) for e in discovery_errors],
                config_error=str(exc),
                exit_code=EXIT_CONFIG_ERROR,
            )

        aborted = False
        for unit in units:
            if aborted:
                machine.transition(unit, UnitState.FAILED, reason="not run: fail-fast")
                continue
            state = self.run_unit(unit, context, inspector, machine, log)
            if state == UnitState.FAILED and context.fail_fast:
                logger.error("Fail-fast: stopping after %s", unit.key)
                aborted = True

        fan_out: list[FanOutOutcome] = []
        if aborted:
            logger.error("Fail-fast: fan-out skipped")
        else:
            done = [u for u in units if machine.state_of(u) == UnitState.DONE]
            fan_out = self.fan_out(context, plan, done)

        report = RunReport(
            context=context,
            outcomes=log.entries(),
            unit_states=machine.all_states(),
            fan_out=fan_out,
            discovery_errors=[str(e) for e in discovery_errors],
        )
        exit_code = self.exit_code_for(report)
        report = report.model_copy(update={"exit_code": exit_code})
        logger.info(
            "Run %s finished: %d unit(s), %d failed, %d fan-out failure(s), exit %d",
            context.run_id,
            len(units),
            len(report.failed_units),
            len(report.failed_fan_out),
            exit_code,
        )
        return report

    def prepare(
        self,
        repo_root: Path,
        branch: str | None = None,
        *,
        now: datetime | None = None,
    ) -> tuple[RunContext, PublishPlan]:
        """Build the run identity and validated publish plan.

        Raises ``ConfigError`` if the run cannot start.
        """
        branch_name = resolve_branch_name(repo_root, self.settings, self.runner, branch)
        context = build_run_context(
            repo_root, branch_name, self.settings, now=now or datetime.now(timezone.utc)
        )
        policy = self._policy or PublishPolicy.from_settings(self.settings, repo_root)
        plan = policy.targets_for(context.deployment.channel)
        enforce_release_constraints(self.settings, plan, which=self._which)
        return context, plan

    def check_build_tools(self, units: list[BuildUnit], inspector: UnitInspector) -> None:
        """Resolve every toolchain up front and require the tools they name.

        Raises ``ConfigError`` if a needed build tool is missing.
        """
        selections = []
        for unit in units:
            try:
                selections.append(inspector.inspect(unit))
            except DiscoveryError:
                continue  # recorded as the unit's failure when it runs
        enforce_build_tools(self.settings, selections, which=self._which)

    # ------------------------------------------------------------------
    # Per-unit state machine
    # ------------------------------------------------------------------

    def run_unit(
        self,
        unit: BuildUnit,
        context: RunContext,
        inspector: UnitInspector,
        machine: UnitStateMachine,
        log: OutcomeLog,
    ) -> UnitState:
        """Drive *unit* from DISCOVERED to DONE or FAILED."""
        try:
            resolved, selection = inspector.inspect(unit)
        except DiscoveryError as exc:
            # No toolchain means the first stage cannot start.
            log.append(
                StageOutcome(
                    unit=unit, stage=Stage.RESTORE, succeeded=False, exit_code=-1,
                    message=str(exc),
                )
            )
            logger.error("%s: %s", unit.key, exc)
            machine.transition(unit, UnitState.FAILED, reason=str(exc))
            return UnitState.FAILED

        strategy = strategy_for(
            selection.tool,
            dotnet_tool=self.settings.dotnet_tool,
            msbuild_tool=self.settings.msbuild_tool,
            docs_tool=self.settings.docs_tool,
        )
        context.unit_output_dir(resolved).mkdir(parents=True, exist_ok=True)
        logger.info("%s: building with %r", resolved.key, strategy)

        try:
            for step in STAGE_SEQUENCE:
                if not self._precondition_met(step, resolved, context):
                    logger.debug("%s: %s skipped", resolved.key, step.stage.value)
                    continue
                machine.transition(resolved, step.state)
                self._run_stage(step, resolved, strategy, context, log)
        except StageFailure as exc:
            machine.transition(resolved, UnitState.FAILED, reason=str(exc))
            return UnitState.FAILED

        machine.transition(resolved, UnitState.DONE)
        return UnitState.DONE

    def _run_stage(
        self,
        step: StageStep,
        unit: BuildUnit,
        strategy: BuildStrategy,
        context: RunContext,
        log: OutcomeLog,
    ) -> StageOutcome:
        argv = strategy.command(step.stage, unit, context)
        logger.info("%s: %s", unit.key, step.stage.value)
        started_at = datetime.now(timezone.utc)
        result = self.runner.run(argv, cwd=unit.project_path.parent)
        outcome = log.append(
            StageOutcome(
                unit=unit,
                stage=step.stage,
                succeeded=result.succeeded,
                exit_code=result.exit_code,
                message=None if result.succeeded else result.tail(1000),
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
            )
        )
        if not outcome.succeeded:
            logger.error(
                "%s: %s failed with exit code %d", unit.key, step.stage.value, result.exit_code
            )
            if step.fatal:
                raise StageFailure(outcome)
        return outcome

    @staticmethod
    def _precondition_met(step: StageStep, unit: BuildUnit, context: RunContext) -> bool:
        if step.precondition is None:
            return True
        if step.precondition in BuildUnit.model_fields:
            return bool(getattr(unit, step.precondition))
        return bool(getattr(context, step.precondition))

    # ------------------------------------------------------------------
    # Fan-out and exit status
    # ------------------------------------------------------------------

    def fan_out(
        self, context: RunContext, plan: PublishPlan, units: list[BuildUnit]
    ) -> list[FanOutOutcome]:
        """Deliver the artifacts of *units* to every destination in *plan*."""
        artifacts = collect_artifacts(context, units)
        destinations = build_destinations(plan, context, self.settings, self.runner)
        return FanOutDispatcher(destinations).dispatch(artifacts)

    def exit_code_for(self, report: RunReport) -> int:
        """Non-zero iff anything fatal happened during the run."""
        if report.config_error:
            return EXIT_CONFIG_ERROR
        failed = bool(report.failed_units or report.failed_fan_out or report.discovery_errors)
        if self.settings.treat_test_failures_as_fatal:
            failed = failed or any(
                o.stage == Stage.TEST and not o.succeeded for o in report.outcomes
            )
        return EXIT_FAILURE if failed else EXIT_OK


def write_report(report: RunReport, path: Path) -> Path:
    """Write *report* as JSON to *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    return path
