"""Blocking external-process invocation with captured output.

Every build tool runs one at a time with the shared compiler server and
MSBuild node reuse disabled, so logs are reproducible and no process
outlives its stage.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124

SECRET_OPTIONS: frozenset[str] = frozenset({"--api-key", "-k", "--password"})
REDACTED = "***"

PINNED_ENVIRONMENT: dict[str, str] = {
    "UseSharedCompilation": "false",
    "MSBUILDDISABLENODEREUSE": "1",
    "DOTNET_CLI_TELEMETRY_OPTOUT": "1",
    "DOTNET_NOLOGO": "1",
}


def redact(argv: Sequence[str]) -> list[str]:
    """Copy of *argv* with the value of every secret option masked.

    Handles both ``--api-key VALUE`` and ``--api-key=VALUE``.
    """
    redacted: list[str] = []
    mask_next = False
    for arg in argv:
        if mask_next:
            redacted.append(REDACTED)
            mask_next = False
            continue
        option, sep, _ = arg.partition("=")
        if option in SECRET_OPTIONS and sep:
            redacted.append(f"{option}={REDACTED}")
        else:
            redacted.append(arg)
            mask_next = arg in SECRET_OPTIONS
    return redacted


class ProcessResult(BaseModel):
    """Bounded result of one invocation."""

    model_config = ConfigDict(frozen=True)

    argv: list[str]  # secret option values masked
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    allowed: bool = False  # non-zero code on the caller's allow-list

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 or self.allowed

    def tail(self, limit: int = 2000) -> str:
        """Last *limit* characters of stderr, falling back to stdout."""
        text = self.stderr.strip() or self.stdout.strip()
        return text[-limit:]


class ProcessRunner:
    """Runs external tools synchronously.

    Parameters
    ----------
    env:
        Extra environment variables layered over ``os.environ`` and the
        pinned build environment.
    timeout:
        Default per-invocation timeout in seconds (``None`` = unbounded).
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self._env = {**os.environ, **PINNED_ENVIRONMENT, **(env or {})}
        self._timeout = timeout

    def run(
        self,
        argv: Sequence[str],
        cwd: Path | None = None,
        allowed_exit_codes: Iterable[int] = (),
        timeout: float | None = None,
    ) -> ProcessResult:
        """Run *argv* to completion.

        A missing executable or an expired timeout is reported as a failed
        result (exit codes 127 and 124) rather than raised.
        """
        command = [str(a) for a in argv]
        shown = redact(command)
        allowed = set(allowed_exit_codes)
        logger.debug("exec: %s", " ".join(shown))
        try:
            proc = subprocess.run(
                command,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                env=self._env,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except FileNotFoundError as exc:
            logger.error("Executable not found: %s", command[0])
            return ProcessResult(argv=shown, exit_code=EXIT_NOT_FOUND, stderr=str(exc))
        except subprocess.TimeoutExpired as exc:
            logger.error("Timed out after %ss: %s", exc.timeout, " ".join(shown))
            return ProcessResult(
                argv=shown,
                exit_code=EXIT_TIMEOUT,
                stderr=f"timed out after {exc.timeout}s",
            )

        result = ProcessResult(
            argv=shown,
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            allowed=proc.returncode != 0 and proc.returncode in allowed,
        )
        if not result.succeeded:
            logger.debug("exit %d: %s", proc.returncode, result.tail(500))
        return result
