"""Launch description for a built executable."""

from __future__ import annotations

import os
import subprocess
from os import PathLike
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

StrPath = Union[str, PathLike]


class Command:
    """
    A program plus the arguments, environment and working directory to run it with.

    Configuration methods return the command itself so calls can be chained:

        result = bintest.command("server").arg("--help").output()

    Nothing is started until spawn(), run() or output() is called.
    """

    def __init__(self, program: StrPath) -> None:
        self.program = Path(program)
        self._args: list[str] = []
        self._env: dict[str, str] = {}
        self._env_removed: set[str] = set()
        self._cwd: Optional[Path] = None

    def __repr__(self) -> str:
        return f"Command({self.argv!r})"

    def arg(self, value: StrPath) -> "Command":
        self._args.append(os.fspath(value))
        return self

    def args(self, values: Iterable[StrPath]) -> "Command":
        for value in values:
            self.arg(value)
        return self

    def env(self, key: str, value: str) -> "Command":
        """Set an environment variable for the child, on top of the inherited ones."""
        self._env[key] = value
        self._env_removed.discard(key)
        return self

    def envs(self, values: Mapping[str, str]) -> "Command":
        for key, value in values.items():
            self.env(key, value)
        return self

    def env_remove(self, key: str) -> "Command":
        self._env.pop(key, None)
        self._env_removed.add(key)
        return self

    def current_dir(self, path: StrPath) -> "Command":
        self._cwd = Path(path)
        return self

    @property
    def argv(self) -> list[str]:
        return [str(self.program), *self._args]

    @property
    def cwd(self) -> Optional[Path]:
        return self._cwd

    def environment(self) -> Optional[dict[str, str]]:
        """Environment for the child, or None to inherit unchanged."""
        if not self._env and not self._env_removed:
            return None
        env = {
            key: value
            for key, value in os.environ.items()
            if key not in self._env_removed
        }
        env.update(self._env)
        return env

    def _popen_kwargs(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        kwargs.setdefault("cwd", self._cwd)
        kwargs.setdefault("env", self.environment())
        return kwargs

    def spawn(self, **kwargs: Any) -> subprocess.Popen:
        """Start the program; extra keyword arguments go to subprocess.Popen."""
        return subprocess.Popen(self.argv, **self._popen_kwargs(kwargs))

    def run(self, **kwargs: Any) -> subprocess.CompletedProcess:
        """Run the program to completion; extra keyword arguments go to subprocess.run."""
        return subprocess.run(self.argv, **self._popen_kwargs(kwargs))

    def output(self, **kwargs: Any) -> subprocess.CompletedProcess:
        """Run to completion with stdout and stderr captured as text."""
        kwargs.setdefault("capture_output", True)
        kwargs.setdefault("text", True)
        return self.run(**kwargs)
