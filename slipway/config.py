"""Run configuration — env-driven via pydantic-settings.

Reads from a .env file and SLIPWAY_* environment variables.  Settings are
read once per process invocation and handed to the driver; nothing in the
pipeline mutates them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class SlipwaySettings(BaseSettings):
    """Orchestrator configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export SLIPWAY_LOG_LEVEL=DEBUG
        export SLIPWAY_FAIL_FAST=true
        export SLIPWAY_PUBLIC_REGISTRY_API_KEY=...

    Or via .env file::

        SLIPWAY_PROPERTY_READER=drydock
        SLIPWAY_DOCS_ENABLED=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SLIPWAY_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime
    log_level: str = "INFO"
    debug: bool = False
    fail_fast: bool = False
    treat_test_failures_as_fatal: bool = False
    branch: str | None = None

    # Repository layout (relative paths resolve against the repository root)
    source_dir: Path = Path("source")
    artifacts_dir: Path = Path("artifacts")
    local_feed_dir: Path = Path("artifacts/feed")
    drop_root: Path = Path("artifacts/drops")
    distribution_root: Path = Path("artifacts/distribution")
    zip_root: Path = Path("artifacts/zip")

    # Version encoding
    version_build: int = 1
    version_major: int = 0
    version_epoch: datetime = datetime(1970, 1, 1, tzinfo=timezone.utc)

    # Tools
    dotnet_tool: str = "dotnet"
    msbuild_tool: str = "msbuild"
    property_reader: str = "xml"  # "xml" (in-process) or "drydock" (external CLI)
    drydock_tool: str = "drydock"
    git_tool: str = "git"
    docs_enabled: bool = False
    docs_tool: str = "docfx"
    build_configuration: str = "Release"
    stage_timeout_seconds: int | None = None

    # Registries. Credentials are referenced by field name from PublishTarget
    github_feed_url: str = ""
    github_token: str = ""
    test_registry_url: str = "https://apiint.nugettest.org/v3/index.json"
    test_registry_api_key: str = ""
    public_registry_url: str = "https://api.nuget.org/v3/index.json"
    public_registry_api_key: str = ""

    def resolve_path(self, repo_root: Path, value: Path) -> Path:
        """Resolve a configured path against the repository root."""
        return value if value.is_absolute() else repo_root / value

    def credential(self, ref: str | None) -> str:
        """Return the secret named by *ref*, or an empty string."""
        if not ref:
            return ""
        return str(getattr(self, ref, "") or "")


def get_settings() -> SlipwaySettings:
    """Read settings from the environment for the current invocation."""
    return SlipwaySettings()
