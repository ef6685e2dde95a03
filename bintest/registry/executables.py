"""The executable registry: one 'cargo build' per process, shared by every caller."""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import ItemsView, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Union

from bintest.config.builder import BinTestBuilder
from bintest.config.settings import BuildConfig
from bintest.registry.cell import OnceCell
from bintest.runner.command import build_command
from bintest.runner.messages import iter_executables
from bintest.runner.process import Command
from bintest.utils.errors import (
    BuildFailedError,
    ConfigurationConflictError,
    MalformedMessageError,
    ToolchainUnavailableError,
    UnknownExecutableError,
)
from bintest.utils.logging import get_logger, new_build_id

logger = get_logger("registry.executables")


class BinTest:
    """
    Executables built by 'cargo build', looked up by name.

    There is one BinTest per process. It is created by the first call to
    BinTest.new(), BinTestBuilder.build() or acquire(), and every later
    call must use an equal configuration or it fails with
    ConfigurationConflictError. Names are file names without directory
    and platform executable suffix.
    """

    def __init__(self, configured_with: BuildConfig, executables: Mapping[str, Path]) -> None:
        self.configured_with = configured_with
        self._executables: Mapping[str, Path] = MappingProxyType(
            dict(sorted(executables.items()))
        )

    def __repr__(self) -> str:
        return f"BinTest({list(self._executables)!r})"

    def __contains__(self, name: object) -> bool:
        return name in self._executables

    def __len__(self) -> int:
        return len(self._executables)

    @classmethod
    def new(cls) -> "BinTest":
        """Get the BinTest singleton built with the default configuration."""
        return acquire(BuildConfig())

    @staticmethod
    def builder() -> BinTestBuilder:
        """
        Start a custom configuration.

        Example:
            executables = BinTest.builder().quiet().build()
        """
        return BinTestBuilder()

    @property
    def executables(self) -> Mapping[str, Path]:
        """Read-only name to path mapping, sorted by name."""
        return self._executables

    def list_executables(self) -> ItemsView[str, Path]:
        """(name, path) pairs in name order; can be iterated any number of times."""
        return self._executables.items()

    def command(self, name: str) -> Command:
        """
        Create a Command for the executable with the given name.

        Raises:
            UnknownExecutableError: no executable with that name was built
        """
        try:
            path = self._executables[name]
        except KeyError:
            raise UnknownExecutableError(name) from None
        return Command(path)


_SINGLETON: OnceCell[BinTest] = OnceCell()


def _run_build(config: BuildConfig) -> BinTest:
    command = build_command(config)
    new_build_id()
    logger.info("build_started", command=shlex.join(command))

    try:
        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
        )
    except OSError as e:
        logger.error("toolchain_unavailable", command=command[0], error=str(e))
        raise ToolchainUnavailableError(command, e) from e

    executables: dict[str, Path] = {}
    with process:
        try:
            # bytes; the parser decodes line by line
            for name, path in iter_executables(process.stdout):
                executables[name] = path
        except MalformedMessageError as e:
            process.kill()
            returncode = process.wait()
            logger.error("build_failed", reason=str(e), returncode=returncode)
            raise BuildFailedError(command, returncode, f"malformed build message, {e}") from e
        # cargo closes stdout before exiting, so the status is final once the stream is drained
        returncode = process.wait()

    if returncode != 0:
        logger.error("build_failed", returncode=returncode, discovered=len(executables))
        raise BuildFailedError(command, returncode)

    logger.info("build_finished", executables=sorted(executables))
    return BinTest(config, executables)


def acquire(config: Union[BuildConfig, BinTestBuilder, None] = None) -> BinTest:
    """
    Get the process-wide BinTest, building it on first use.

    The first caller runs cargo; concurrent callers wait for it and then
    share its result. A failed build is not stored, so it is reported to
    every caller that tries.

    Args:
        config: Build configuration (or a builder holding one); defaults apply if None

    Returns:
        The shared BinTest

    Raises:
        ConfigurationConflictError: the BinTest was built with a different configuration
        ToolchainUnavailableError: cargo could not be started
        BuildFailedError: cargo failed or produced unreadable output
    """
    if config is None:
        config = BuildConfig()
    elif isinstance(config, BinTestBuilder):
        config = config.config

    built: list[BinTest] = []

    def factory() -> BinTest:
        built.append(_run_build(config))
        return built[0]

    singleton = _SINGLETON.get_or_init(factory)

    if singleton.configured_with != config:
        differing = singleton.configured_with.diff(config)
        logger.error("configuration_conflict", differing=differing)
        raise ConfigurationConflictError(differing)

    if not built:
        logger.debug("registry_reused", executables=len(singleton))
    return singleton
