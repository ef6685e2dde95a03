"""Translate a BuildConfig into a 'cargo build' invocation."""

from __future__ import annotations

import os
from typing import Optional

from bintest.config.settings import BuildConfig

BUILD_TOOL_ENV = "CARGO"
DEFAULT_BUILD_TOOL = "cargo"

# Always requested: the registry only understands JSON build messages
BUILD_ARGUMENTS = ("build", "--message-format", "json")


def get_build_tool() -> str:
    """
    Get the cargo executable to run.

    Uses the env var `CARGO`, which cargo itself sets when running tests.
    Otherwise 'cargo' is looked up on PATH when spawned.
    """
    return os.environ.get(BUILD_TOOL_ENV) or DEFAULT_BUILD_TOOL


def compose_arguments(config: BuildConfig) -> list[str]:
    """
    Build the argument list for cargo, without the executable itself.

    Args:
        config: Build configuration

    Returns:
        Arguments in a fixed order: flags first, then valued options
    """
    args = list(BUILD_ARGUMENTS)

    if config.build_workspace:
        args.append("--workspace")
    if config.quiet:
        args.append("--quiet")
    if config.release:
        args.append("--release")
    if config.offline:
        args.append("--offline")
    if config.all_targets:
        args.append("--all-targets")

    if config.features is not None:
        args.extend(["--features", config.features])
    if config.profile is not None:
        args.extend(["--profile", config.profile])

    for binary in config.binaries or ():
        args.extend(["--bin", binary])
    for example in config.examples or ():
        args.extend(["--example", example])

    if config.manifest_path is not None:
        args.extend(["--manifest-path", config.manifest_path])

    return args


def build_command(config: BuildConfig, tool: Optional[str] = None) -> list[str]:
    """Full command line for the build, starting with the cargo executable."""
    return [tool or get_build_tool(), *compose_arguments(config)]
