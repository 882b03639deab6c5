"""Run identity — branch resolution and the immutable ``RunContext``."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from slipway.config import SlipwaySettings
from slipway.core.branch_classifier import classify
from slipway.core.process import ProcessRunner
from slipway.core.version_codec import VersionCodec
from slipway.errors import ConfigError, VersionRangeError
from slipway.models.context import RunContext

logger = logging.getLogger(__name__)

# Checked in order after the explicit option and SLIPWAY_BRANCH.
CI_BRANCH_VARIABLES: tuple[str, ...] = ("GITHUB_HEAD_REF", "GITHUB_REF_NAME")


def resolve_branch_name(
    repo_root: Path,
    settings: SlipwaySettings,
    runner: ProcessRunner,
    explicit: str | None = None,
) -> str:
    """Determine the branch being built.

    Precedence: *explicit* > ``settings.branch`` > CI variables >
    ``git rev-parse --abbrev-ref HEAD``.
    """
    for candidate in (explicit, settings.branch):
        if candidate:
            return candidate
    for variable in CI_BRANCH_VARIABLES:
        value = os.environ.get(variable, "").strip()
        if value:
            logger.debug("Branch taken from %s", variable)
            return value

    result = runner.run(
        [settings.git_tool, "rev-parse", "--abbrev-ref", "HEAD"], cwd=repo_root
    )
    name = result.stdout.strip()
    if not result.succeeded or not name or name == "HEAD":
        raise ConfigError(
            "Cannot determine the branch name: pass --branch or set SLIPWAY_BRANCH "
            f"(git said: {result.tail(200) or 'detached HEAD'})."
        )
    return name


def build_run_context(
    repo_root: Path,
    branch_name: str,
    settings: SlipwaySettings,
    *,
    now: datetime | None = None,
) -> RunContext:
    """Classify the branch, encode the version, and freeze the run layout."""
    started_at = now or datetime.now(timezone.utc)
    codec = VersionCodec(settings.version_epoch)
    try:
        version = codec.encode(started_at, settings.version_build, settings.version_major)
    except VersionRangeError as exc:
        raise ConfigError(f"Cannot encode a build version: {exc}") from exc

    deployment = classify(branch_name)
    context = RunContext(
        repo_root=repo_root,
        source_root=settings.resolve_path(repo_root, settings.source_dir),
        artifacts_root=settings.resolve_path(repo_root, settings.artifacts_dir),
        deployment=deployment,
        version=version,
        started_at=started_at,
        configuration=settings.build_configuration,
        fail_fast=settings.fail_fast,
        docs_enabled=settings.docs_enabled,
    )
    logger.info(
        "Run %s: branch %s -> %s, version %s",
        context.run_id,
        branch_name,
        deployment.channel.value,
        context.package_version,
    )
    return context
