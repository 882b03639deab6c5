"""Slipway: deterministic build-and-release orchestration for .NET source trees.

Given a repository checkout and a Git branch, slipway computes a release
identity (channel + time-encoded version), discovers every project in every
solution, builds/tests/packs/publishes each one with the toolchain its target
frameworks require, and fans the produced artifacts out to the destinations
the release channel allows.
"""

__version__ = "0.1.0"
__description__ = "Build-and-release orchestrator for multi-project .NET source trees"

from slipway.core.driver import PipelineDriver
from slipway.cli.app import app as cli

__all__ = ["PipelineDriver", "cli", "__version__"]
