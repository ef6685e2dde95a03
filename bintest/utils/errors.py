"""Exceptions raised while building and looking up executables.

None of these are meant to be caught and retried: they abort the calling
test with a message that says what went wrong.
"""

from __future__ import annotations

import shlex
from typing import Optional, Sequence


class BinTestError(Exception):
    """Base class for all bintest failures."""


class BuilderMisuseError(BinTestError, ValueError):
    """A single-use builder option was set twice, or set to nothing."""


class ConfigurationConflictError(BinTestError, AssertionError):
    """The registry was requested with a configuration other than the one it was built with."""

    def __init__(self, differing: Sequence[str]) -> None:
        self.differing = tuple(differing)
        message = "All calls to BinTest must be configured with the same values"
        if self.differing:
            message += f" (differs in: {', '.join(self.differing)})"
        super().__init__(message)


class ToolchainUnavailableError(BinTestError):
    """The build tool could not be launched."""

    def __init__(self, command: Sequence[str], cause: OSError) -> None:
        self.command = list(command)
        self.cause = cause
        super().__init__(
            f"'{shlex.join(self.command)}' could not be started: {cause}"
        )


class BuildFailedError(BinTestError):
    """The build tool ran but did not produce a usable build."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int],
        reason: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.reason = reason
        message = f"'{shlex.join(self.command)}' failed"
        if returncode is not None:
            message += f" with exit status {returncode}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MalformedMessageError(BinTestError):
    """A line of the build message stream is not a valid build record."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        shown = line if len(line) <= 120 else line[:117] + "..."
        super().__init__(f"line {line_number}: {reason}: {shown!r}")


class UnknownExecutableError(BinTestError):
    """No executable with the requested name was built."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"no such executable <<{name}>>")
