import json
from pathlib import Path, PurePosixPath

import pytest

from bintest import MalformedMessageError
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


def test_parse_binary_artifact(artifact):
    message = parse_message(json.dumps(artifact("foo", "/build/debug/foo")))

    assert isinstance(message, CompilerArtifact)
    assert message.target_name == "foo"
    assert message.target_kinds == ("bin",)
    assert message.executable == Path("/build/debug/foo")
    assert message.filenames == ("/build/debug/foo",)
    assert message.fresh is False


def test_parse_library_artifact(artifact):
    message = parse_message(json.dumps(artifact("util", kind="lib")))
    assert isinstance(message, CompilerArtifact)
    assert message.executable is None


def test_parse_compiler_message():
    line = json.dumps({
        "reason": "compiler-message",
        "package_id": "foo 0.1.0",
        "message": {"level": "warning", "rendered": "warning: unused variable `x`\n"},
    })
    assert parse_message(line) == CompilerMessage(
        package_id="foo 0.1.0",
        level="warning",
        rendered="warning: unused variable `x`\n",
    )


def test_parse_build_finished():
    assert parse_message('{"reason": "build-finished", "success": true}') == BuildFinished(success=True)


def test_other_kinds_are_kept():
    line = json.dumps({"reason": "build-script-executed", "package_id": "x", "out_dir": "/o"})
    assert parse_message(line) == OtherMessage(reason="build-script-executed")


@pytest.mark.parametrize(
    "line, reason",
    [
        ("Compiling foo v0.1.0", "invalid JSON"),
        ('["compiler-artifact"]', "not a JSON object"),
        ('{"package_id": "x"}', "missing 'reason'"),
        ('{"reason": 7}', "missing 'reason'"),
        ('{"reason": "compiler-artifact", "executable": 12}', "'executable'"),
        ('{"reason": "build-finished", "success": "yes"}', "'success'"),
        ('{"reason": "compiler-artifact", "filenames": 7, "executable": "/b/foo"}', "'filenames'"),
        ('{"reason": "compiler-artifact", "filenames": ["/b/foo", 3]}', "'filenames'"),
        ('{"reason": "compiler-artifact", "target": {"kind": "bin"}}', r"'target\.kind'"),
        ('{"reason": "compiler-artifact", "target": null}', "'target' must be an object"),
        ('{"reason": "compiler-artifact", "fresh": "no"}', "'fresh'"),
        ('{"reason": "compiler-artifact", "executable": ""}', "must not be empty"),
    ],
)
def test_malformed_records(line, reason):
    with pytest.raises(MalformedMessageError, match=reason):
        parse_message(line)


def test_stream_skips_blank_lines_and_counts_them(artifact):
    lines = ["", json.dumps(artifact("a", "/b/a")), "   ", "oops"]
    messages = parse_stream(lines)

    assert isinstance(next(messages), CompilerArtifact)
    with pytest.raises(MalformedMessageError) as excinfo:
        next(messages)
    assert excinfo.value.line_number == 4
    assert excinfo.value.line == "oops"


def test_stream_is_lazy():
    def lines():
        yield '{"reason": "build-finished", "success": true}'
        raise AssertionError("read past the first record")

    assert next(parse_stream(lines())) == BuildFinished(success=True)


def test_single_executable(artifact):
    lines = [json.dumps(artifact("foo", "/build/debug/foo"))]
    assert list(iter_executables(lines)) == [("foo", Path("/build/debug/foo"))]


def test_library_contributes_nothing(artifact):
    lines = [
        json.dumps(artifact("util", kind="lib")),
        json.dumps(artifact("bar", "/build/debug/bar")),
    ]
    assert list(iter_executables(lines)) == [("bar", Path("/build/debug/bar"))]


def test_compiler_messages_are_not_executables():
    lines = [
        json.dumps({
            "reason": "compiler-message",
            "package_id": "foo",
            "message": {"level": "error", "rendered": "error[E0425]: cannot find value"},
        }),
        '{"reason": "build-finished", "success": false}',
    ]
    assert list(iter_executables(lines)) == []


@pytest.mark.parametrize(
    "path, suffix, name",
    [
        ("/build/debug/foo", "", "foo"),
        ("/build/debug/foo-1.2", "", "foo-1.2"),
        (PurePosixPath("/build/debug/foo"), "", "foo"),
        ("C:/build/debug/foo.exe", ".exe", "foo"),
        ("C:/build/debug/FOO.EXE", ".exe", "FOO"),
        ("/build/debug/foo.exe", "", "foo.exe"),
        ("/build/debug/foo", ".exe", "foo"),
    ],
)
def test_executable_name(path, suffix, name):
    assert executable_name(path, suffix=suffix) == name


def test_stream_decodes_byte_lines(artifact):
    lines = [json.dumps(artifact("foo", "/build/debug/foo")).encode() + b"\n"]
    assert list(iter_executables(lines)) == [("foo", Path("/build/debug/foo"))]


def test_invalid_utf8_is_malformed():
    lines = [b'{"reason": "build-finished", "success": true}\n', b"\xff\xfe{}\n"]

    with pytest.raises(MalformedMessageError, match="invalid UTF-8") as excinfo:
        list(parse_stream(lines))
    assert excinfo.value.line_number == 2
