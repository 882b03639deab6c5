"""Branch classification — branch name -> deployment channel + path-safe identity.

``classify`` is total: any input, including the empty string, classifies.
Unrecognized branches become ``unknown`` with a pre-release suffix derived
from the sanitized branch name, so feature-branch packages stay distinct.
"""

from __future__ import annotations

import logging
import re

from slipway.models.deployment import (
    RECOGNIZED_CHANNELS,
    Affix,
    BranchIdentity,
    DeploymentChannel,
    DeploymentInfo,
)

logger = logging.getLogger(__name__)

SAFE_CHARACTER = "_"

# Characters illegal in a path component on any mainstream filesystem,
# plus ASCII control characters.  "/" is handled as a segment boundary.
_ILLEGAL_PATH_CHARS = re.compile(r'[<>:"\\|?*\x00-\x1f\x7f]')
_PRERELEASE_UNSAFE = re.compile(r"[^0-9A-Za-z-]+")

_CHANNEL_BY_NAME: dict[str, DeploymentChannel] = {
    channel.value: channel for channel in RECOGNIZED_CHANNELS
}


def sanitize_segment(segment: str) -> str:
    """Make one branch segment a legal path component."""
    cleaned = _ILLEGAL_PATH_CHARS.sub(SAFE_CHARACTER, segment.strip())
    # Trailing dots and spaces are dropped by Windows; "." and ".." are reserved.
    cleaned = cleaned.rstrip(". ")
    if not cleaned or set(cleaned) == {"."}:
        return SAFE_CHARACTER
    return cleaned


def branch_identity(raw_name: str) -> BranchIdentity:
    """Split *raw_name* on ``/`` and sanitize every segment."""
    parts = [p for p in raw_name.replace("\\", "/").split("/") if p.strip()]
    segments = tuple(sanitize_segment(p) for p in parts) or (SAFE_CHARACTER,)
    return BranchIdentity(raw_name=raw_name, segments=segments)


def prerelease_suffix(identity: BranchIdentity) -> str:
    """Build a ``-label`` suffix restricted to pre-release-safe characters."""
    joined = "-".join(identity.segments)
    label = _PRERELEASE_UNSAFE.sub("-", joined).strip("-").lower()
    label = re.sub(r"-{2,}", "-", label)
    return f"-{label or DeploymentChannel.UNKNOWN.value}"


def classify(branch_name: str) -> DeploymentInfo:
    """Classify *branch_name*.  Never raises for string input."""
    identity = branch_identity(branch_name)
    channel = _CHANNEL_BY_NAME.get(branch_name.strip().lower(), DeploymentChannel.UNKNOWN)

    if channel == DeploymentChannel.PRODUCTION:
        affix = Affix(suffix="", label=channel.value)
    elif channel == DeploymentChannel.UNKNOWN:
        suffix = prerelease_suffix(identity)
        affix = Affix(suffix=suffix, label=suffix.lstrip("-"))
    else:
        affix = Affix(suffix=f"-{channel.value}", label=channel.value)

    logger.debug(
        "Branch %r classified as %s (suffix=%r)", branch_name, channel.value, affix.suffix
    )
    return DeploymentInfo(channel=channel, affix=affix, branch=identity)
