"""Tests for external process invocation."""

from __future__ import annotations

import logging
import sys

import pytest

from slipway.core.process import (
    EXIT_NOT_FOUND,
    EXIT_TIMEOUT,
    PINNED_ENVIRONMENT,
    REDACTED,
    ProcessResult,
    ProcessRunner,
    redact,
)

SECRET = "SECRET-KEY-123"


class TestProcessRunner:
    def test_captures_output_and_exit_code(self):
        result = ProcessRunner().run(
            [sys.executable, "-c", "import sys; print('out'); sys.exit(3)"]
        )
        assert result.exit_code == 3
        assert result.stdout.strip() == "out"
        assert not result.succeeded

    def test_allowed_exit_code(self):
        result = ProcessRunner().run(
            [sys.executable, "-c", "import sys; sys.exit(14)"], allowed_exit_codes=(14,)
        )
        assert result.succeeded
        assert result.allowed

    def test_pinned_environment(self):
        result = ProcessRunner(env={"EXTRA_FLAG": "on"}).run(
            [
                sys.executable, "-c",
                "import os; print(os.environ['UseSharedCompilation'], "
                "os.environ['MSBUILDDISABLENODEREUSE'], os.environ['EXTRA_FLAG'])",
            ]
        )
        assert result.stdout.split() == [
            PINNED_ENVIRONMENT["UseSharedCompilation"],
            PINNED_ENVIRONMENT["MSBUILDDISABLENODEREUSE"],
            "on",
        ]

    def test_missing_executable(self, tmp_path):
        result = ProcessRunner().run([str(tmp_path / "no-such-tool")])
        assert result.exit_code == EXIT_NOT_FOUND
        assert not result.succeeded

    def test_timeout(self):
        result = ProcessRunner().run(
            [sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2
        )
        assert result.exit_code == EXIT_TIMEOUT

    def test_cwd(self, tmp_path):
        result = ProcessRunner().run(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert result.stdout.strip() == str(tmp_path)


class TestProcessResult:
    def test_tail_prefers_stderr(self):
        result = ProcessResult(argv=["x"], exit_code=1, stdout="out", stderr="err")
        assert result.tail() == "err"

    def test_tail_is_bounded(self):
        result = ProcessResult(argv=["x"], exit_code=1, stdout="a" * 50)
        assert result.tail(10) == "a" * 10


class TestSecretRedaction:
    @pytest.mark.parametrize(
        ("argv", "expected"),
        [
            (["dotnet", "nuget", "push", "p.nupkg", "--api-key", SECRET],
             ["dotnet", "nuget", "push", "p.nupkg", "--api-key", REDACTED]),
            (["nuget", "push", "-k", SECRET, "--skip-duplicate"],
             ["nuget", "push", "-k", REDACTED, "--skip-duplicate"]),
            (["dotnet", "nuget", "push", f"--api-key={SECRET}"],
             ["dotnet", "nuget", "push", f"--api-key={REDACTED}"]),
            (["dotnet", "build", "-p:Version=1.0.0.0"], ["dotnet", "build", "-p:Version=1.0.0.0"]),
        ],
    )
    def test_redact(self, argv, expected):
        assert redact(argv) == expected

    def test_secret_reaches_the_process_but_not_the_log(self, caplog):
        caplog.set_level(logging.DEBUG, logger="slipway.core.process")
        result = ProcessRunner().run(
            [sys.executable, "-c", "import sys; print(sys.argv[-1])", "--api-key", SECRET]
        )
        assert result.stdout.strip() == SECRET
        assert SECRET not in caplog.text
        assert SECRET not in result.argv
        assert "--api-key ***" in caplog.text

    def test_timeout_log_is_redacted(self, caplog):
        caplog.set_level(logging.DEBUG, logger="slipway.core.process")
        result = ProcessRunner(timeout=0.2).run(
            [sys.executable, "-c", "import time; time.sleep(5)", "--api-key", SECRET]
        )
        assert result.exit_code == EXIT_TIMEOUT
        errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert errors and all(SECRET not in message for message in errors)
        assert SECRET not in caplog.text
