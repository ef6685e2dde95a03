import json
import stat
import sys
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

import pytest

from bintest.registry import executables as executables_module
from bintest.registry.cell import OnceCell

FAKE_CARGO = """#!{python}
import json
import sys
import time

with open({calls!r}, "a") as f:
    f.write(json.dumps(sys.argv[1:]) + "\\n")

with open({plan!r}) as f:
    plan = json.load(f)

time.sleep(plan["delay"])
for line in plan["lines"]:
    sys.stdout.write(line + "\\n")
sys.stdout.flush()
sys.stdout.buffer.write(bytes.fromhex(plan["raw"]))
sys.stdout.buffer.flush()
if plan["stderr"]:
    sys.stderr.write(plan["stderr"] + "\\n")
sys.exit(plan["exit_code"])
"""


class FakeCargo:
    """A stand-in cargo executable that replays canned JSON lines and records its calls."""

    def __init__(self, directory: Path) -> None:
        self.script = directory / "fake-cargo"
        self.plan = directory / "plan.json"
        self.calls_file = directory / "calls.jsonl"
        self.script.write_text(
            FAKE_CARGO.format(
                python=sys.executable,
                calls=str(self.calls_file),
                plan=str(self.plan),
            )
        )
        self.script.chmod(self.script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        self.emit([])

    def emit(
        self,
        records: Iterable[Union[dict, str]],
        exit_code: int = 0,
        delay: float = 0.0,
        stderr: str = "",
        raw: bytes = b"",
    ) -> None:
        """Set what the next runs print.

        Dicts are JSON encoded and strings written as-is, one per line;
        raw bytes follow them unchanged.
        """
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        self.plan.write_text(json.dumps({
            "lines": lines,
            "raw": raw.hex(),
            "exit_code": exit_code,
            "delay": delay,
            "stderr": stderr,
        }))

    @property
    def calls(self) -> List[List[str]]:
        if not self.calls_file.exists():
            return []
        return [json.loads(line) for line in self.calls_file.read_text().splitlines()]


def artifact_record(
    name: str,
    executable: Optional[str] = None,
    kind: str = "bin",
    fresh: bool = False,
) -> dict[str, Any]:
    """A 'compiler-artifact' record shaped like the ones cargo emits."""
    if executable is None:
        filenames = [f"/build/debug/deps/lib{name}.rlib"]
    else:
        filenames = [executable]
    return {
        "reason": "compiler-artifact",
        "package_id": f"{name} 0.1.0 (path+file:///work/{name})",
        "manifest_path": f"/work/{name}/Cargo.toml",
        "target": {
            "kind": [kind],
            "crate_types": [kind],
            "name": name,
            "src_path": f"/work/{name}/src/main.rs",
            "edition": "2021",
            "doc": True,
            "doctest": False,
            "test": True,
        },
        "profile": {
            "opt_level": "0",
            "debuginfo": 2,
            "debug_assertions": True,
            "overflow_checks": True,
            "test": False,
        },
        "features": [],
        "filenames": filenames,
        "executable": executable,
        "fresh": fresh,
    }


@pytest.fixture(autouse=True)
def fresh_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test its own, empty registry singleton."""
    monkeypatch.setattr(executables_module, "_SINGLETON", OnceCell())


@pytest.fixture
def fake_cargo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeCargo:
    """Point CARGO at a fake cargo script.

    Tests set its output with ``fake_cargo.emit(...)`` and inspect the
    recorded command lines through ``fake_cargo.calls``.
    """
    fake = FakeCargo(tmp_path)
    monkeypatch.setenv("CARGO", str(fake.script))
    return fake


@pytest.fixture
def artifact():
    """Factory for cargo 'compiler-artifact' records."""
    return artifact_record
