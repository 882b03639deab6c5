"""Deployment identity models — channel, affix and sanitized branch identity."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class DeploymentChannel(str, Enum):
    """Release channel derived from the branch name."""

    DEVELOPMENT = "development"
    QUALITY = "quality"
    STAGING = "staging"
    PRODUCTION = "production"
    UNKNOWN = "unknown"


RECOGNIZED_CHANNELS: tuple[DeploymentChannel, ...] = (
    DeploymentChannel.DEVELOPMENT,
    DeploymentChannel.QUALITY,
    DeploymentChannel.STAGING,
    DeploymentChannel.PRODUCTION,
)


class BranchIdentity(BaseModel):
    """Raw branch name plus its path-safe segments.

    Slashes in the raw name become segment boundaries; every segment is a
    legal filesystem path component.
    """

    model_config = ConfigDict(frozen=True)

    raw_name: str
    segments: tuple[str, ...]

    @field_validator("segments")
    @classmethod
    def _non_empty(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("a branch identity needs at least one path segment")
        return value

    @property
    def path(self) -> str:
        """Segments joined with ``/`` (for display and relative paths)."""
        return "/".join(self.segments)


class Affix(BaseModel):
    """Pre-release suffix (``""`` for production) and a human label."""

    model_config = ConfigDict(frozen=True)

    suffix: str = ""
    label: str = ""


class DeploymentInfo(BaseModel):
    """Classification of a run's branch — created once per run."""

    model_config = ConfigDict(frozen=True)

    channel: DeploymentChannel
    affix: Affix
    branch: BranchIdentity

    @property
    def is_production(self) -> bool:
        return self.channel == DeploymentChannel.PRODUCTION
