"""Fluent builder for BuildConfig values."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from os import PathLike
from typing import TYPE_CHECKING, Union

from bintest.config.settings import BuildConfig
from bintest.utils.errors import BuilderMisuseError

if TYPE_CHECKING:
    from bintest.registry.executables import BinTest


@dataclass(frozen=True)
class BinTestBuilder:
    """
    Composes a BuildConfig one option at a time.

    Every method returns a new builder; the receiver is never modified, so
    a builder can be kept in a module-level constant and shared:

        BINTEST = BinTest.builder().quiet().binaries("server", "client")

        def test_server():
            executables = BINTEST.build()

    Options that take a value can only be set once. Setting them again
    raises BuilderMisuseError right away rather than at build time.
    """

    config: BuildConfig = field(default_factory=BuildConfig)

    def _set(self, **changes) -> "BinTestBuilder":
        return BinTestBuilder(replace(self.config, **changes))

    def _set_once(self, option: str, value) -> "BinTestBuilder":
        if getattr(self.config, option) is not None:
            raise BuilderMisuseError(f"{option}() can only be used once")
        return self._set(**{option: value})

    def workspace(self) -> "BinTestBuilder":
        """Build all executables in the workspace."""
        return self._set(build_workspace=True)

    def quiet(self) -> "BinTestBuilder":
        """Suppress cargo's progress output."""
        return self._set(quiet=True)

    def release(self) -> "BinTestBuilder":
        """Build in release mode; the default when Python runs with -O."""
        return self._set(release=True)

    def debug(self) -> "BinTestBuilder":
        """Build in debug mode; the default otherwise."""
        return self._set(release=False)

    def offline(self) -> "BinTestBuilder":
        return self._set(offline=True)

    def all_targets(self) -> "BinTestBuilder":
        """Build all targets (--lib --bins --tests --benches --examples)."""
        return self._set(all_targets=True)

    def features(self, features: str) -> "BinTestBuilder":
        """Set the '--features' list, comma or space separated."""
        return self._set_once("features", features)

    def profile(self, profile: str) -> "BinTestBuilder":
        """Select a '--profile' for building."""
        return self._set_once("profile", profile)

    def binaries(self, *names: str) -> "BinTestBuilder":
        """Only build the named binaries."""
        if not names:
            raise BuilderMisuseError("binaries() needs at least one name")
        return self._set_once("binaries", tuple(names))

    def examples(self, *names: str) -> "BinTestBuilder":
        """Only build the named examples."""
        if not names:
            raise BuilderMisuseError("examples() needs at least one name")
        return self._set_once("examples", tuple(names))

    def manifest_path(self, path: Union[str, PathLike]) -> "BinTestBuilder":
        """Point cargo at a Cargo.toml outside the current directory."""
        return self._set_once("manifest_path", str(path))

    def build(self) -> "BinTest":
        """
        Get the BinTest singleton, running 'cargo build' if this is the first call.

        Returns:
            The process-wide BinTest

        Raises:
            ConfigurationConflictError: the singleton exists with another configuration
            ToolchainUnavailableError: cargo could not be started
            BuildFailedError: cargo failed or produced unreadable output
        """
        from bintest.registry.executables import acquire

        return acquire(self.config)
