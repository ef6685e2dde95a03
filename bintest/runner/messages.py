"""Parser for cargo's JSON build message stream.

With '--message-format json' cargo writes one JSON object per line to
stdout. Each object has a "reason" naming its kind; the registry only
needs "compiler-artifact" records that carry an "executable" path.
Records of other kinds are parsed and passed on, never rejected, but a
line that is not a JSON object with a string "reason" means the tool
does not speak the protocol we expect and is a hard error.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Any, Iterable, Iterator, Optional, Union

from bintest.utils.errors import MalformedMessageError
from bintest.utils.logging import get_logger

logger = get_logger("runner.messages")

EXECUTABLE_SUFFIX = ".exe" if os.name == "nt" else ""

COMPILER_ARTIFACT = "compiler-artifact"
COMPILER_MESSAGE = "compiler-message"
BUILD_FINISHED = "build-finished"


@dataclass(frozen=True)
class CompilerArtifact:
    """A target was compiled (or found fresh)."""

    package_id: str
    target_name: str
    target_kinds: tuple[str, ...]
    filenames: tuple[str, ...]
    executable: Optional[Path]
    fresh: bool


@dataclass(frozen=True)
class CompilerMessage:
    """A rustc diagnostic, which JSON mode moves from stderr into the stream."""

    package_id: str
    level: str
    rendered: str


@dataclass(frozen=True)
class BuildFinished:
    success: bool


@dataclass(frozen=True)
class OtherMessage:
    """Any record kind the registry does not use."""

    reason: str


Message = Union[CompilerArtifact, CompilerMessage, BuildFinished, OtherMessage]


def executable_name(path: Union[str, PurePath], suffix: str = EXECUTABLE_SUFFIX) -> str:
    """
    Logical name of an executable: the file name without its platform suffix.

    Args:
        path: Path to the executable
        suffix: Executable suffix of the platform ('.exe' on Windows)

    Returns:
        Bare name used for lookups
    """
    name = PurePath(path).name
    if suffix and name.lower().endswith(suffix.lower()) and len(name) > len(suffix):
        name = name[: -len(suffix)]
    return name


def _string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _parse_artifact(record: dict[str, Any], line_number: int, line: str) -> CompilerArtifact:
    executable = record.get("executable")
    if executable is not None and not isinstance(executable, str):
        raise MalformedMessageError(line_number, line, "'executable' must be a string or null")
    if executable == "":
        raise MalformedMessageError(line_number, line, "'executable' must not be empty")

    target = record.get("target", {})
    if not isinstance(target, dict):
        raise MalformedMessageError(line_number, line, "'target' must be an object")

    kinds = target.get("kind", [])
    if not _string_list(kinds):
        raise MalformedMessageError(line_number, line, "'target.kind' must be a list of strings")

    filenames = record.get("filenames", [])
    if not _string_list(filenames):
        raise MalformedMessageError(line_number, line, "'filenames' must be a list of strings")

    fresh = record.get("fresh", False)
    if not isinstance(fresh, bool):
        raise MalformedMessageError(line_number, line, "'fresh' must be a boolean")

    return CompilerArtifact(
        package_id=str(record.get("package_id", "")),
        target_name=str(target.get("name", "")),
        target_kinds=tuple(kinds),
        filenames=tuple(filenames),
        executable=Path(executable) if executable is not None else None,
        fresh=fresh,
    )


def parse_message(line: str, line_number: int = 1) -> Message:
    """
    Parse one line of the build message stream.

    Args:
        line: A single JSON line
        line_number: 1-based position in the stream, for error reporting

    Returns:
        The typed record

    Raises:
        MalformedMessageError: the line is not a well-formed build record
    """
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedMessageError(line_number, line, f"invalid JSON ({e.msg})") from e

    if not isinstance(record, dict):
        raise MalformedMessageError(line_number, line, "record is not a JSON object")

    reason = record.get("reason")
    if not isinstance(reason, str):
        raise MalformedMessageError(line_number, line, "missing 'reason'")

    if reason == COMPILER_ARTIFACT:
        return _parse_artifact(record, line_number, line)

    if reason == COMPILER_MESSAGE:
        message = record.get("message") or {}
        if not isinstance(message, dict):
            raise MalformedMessageError(line_number, line, "'message' must be an object")
        return CompilerMessage(
            package_id=str(record.get("package_id", "")),
            level=str(message.get("level", "")),
            rendered=str(message.get("rendered") or message.get("message") or ""),
        )

    if reason == BUILD_FINISHED:
        success = record.get("success")
        if not isinstance(success, bool):
            raise MalformedMessageError(line_number, line, "'success' must be a boolean")
        return BuildFinished(success=success)

    return OtherMessage(reason=reason)


def parse_stream(lines: Iterable[Union[str, bytes]]) -> Iterator[Message]:
    """
    Lazily parse a stream of JSON lines, skipping blank ones.

    Byte lines (a child's raw stdout) are decoded as UTF-8 one at a time;
    a line that does not decode is malformed like any other bad record.
    """
    for line_number, raw in enumerate(lines, start=1):
        if isinstance(raw, bytes):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                shown = raw.decode("utf-8", errors="replace").strip()
                raise MalformedMessageError(line_number, shown, f"invalid UTF-8 ({e.reason})") from e
        else:
            line = raw
        line = line.strip()
        if not line:
            continue
        yield parse_message(line, line_number)


def iter_executables(lines: Iterable[Union[str, bytes]]) -> Iterator[tuple[str, Path]]:
    """
    Yield (name, path) for every artifact in the stream that has an executable.

    Library artifacts carry no executable and are skipped. Compiler
    diagnostics are logged so they are not lost in the captured stream.

    Args:
        lines: Cargo's stdout, one JSON record per line

    Yields:
        Executable name and path, in stream order
    """
    for message in parse_stream(lines):
        if isinstance(message, CompilerArtifact):
            if message.executable is None:
                continue
            yield executable_name(message.executable), message.executable

        elif isinstance(message, CompilerMessage):
            if message.level in ("error", "warning"):
                logger.warning(
                    "compiler_message",
                    package_id=message.package_id,
                    level=message.level,
                    rendered=message.rendered,
                )
            else:
                logger.debug(
                    "compiler_message",
                    package_id=message.package_id,
                    level=message.level,
                    rendered=message.rendered,
                )

        elif isinstance(message, BuildFinished):
            logger.debug("build_finished_message", success=message.success)
