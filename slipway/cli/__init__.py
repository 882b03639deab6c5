"""Slipway CLI — Typer-based command-line interface.

Provides the ``slipway`` command with subcommands for running the pipeline
and for inspecting each of its decisions (version, channel, discovery order,
publish plan, toolchain).

All output uses Rich for formatted terminal display.
"""
