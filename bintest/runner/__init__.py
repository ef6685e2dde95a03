"""Build invocation, build message parsing and process launching."""

from bintest.runner.command import (
    BUILD_TOOL_ENV,
    build_command,
    compose_arguments,
    get_build_tool,
)
from bintest.runner.messages import (
    BuildFinished,
    CompilerArtifact,
    CompilerMessage,
    OtherMessage,
    executable_name,
    iter_executables,
    parse_message,
    parse_stream,
)
from bintest.runner.process import Command

__all__ = [
    "BUILD_TOOL_ENV",
    "build_command",
    "compose_arguments",
    "get_build_tool",
    "BuildFinished",
    "CompilerArtifact",
    "CompilerMessage",
    "OtherMessage",
    "executable_name",
    "iter_executables",
    "parse_message",
    "parse_stream",
    "Command",
]
