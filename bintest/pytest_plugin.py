"""pytest integration: a session-scoped ``bintest`` fixture.

The configuration comes from the ``bintest_config`` ini option, a YAML
file relative to the rootdir. Without it ./bintest.yaml is used if it
exists, and the defaults otherwise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from bintest.config.settings import BuildConfig, load_config
from bintest.registry.executables import BinTest, acquire

INI_OPTION = "bintest_config"


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini(
        INI_OPTION,
        help="YAML file with the cargo build configuration for the bintest fixture",
        default="",
    )


def resolve_config(rootpath: Path, ini_value: str) -> BuildConfig:
    """
    Load the configuration named by the ini option.

    Raises:
        pytest.UsageError: the file is missing or invalid
    """
    path: Optional[Path] = None
    if ini_value:
        path = Path(ini_value)
        if not path.is_absolute():
            path = rootpath / path

    result = load_config(path)
    if result.is_err():
        raise pytest.UsageError(f"{INI_OPTION}: {result.unwrap_err()}")
    return result.unwrap()


@pytest.fixture(scope="session")
def bintest(pytestconfig: pytest.Config) -> BinTest:
    """The process-wide BinTest, built on first use."""
    config = resolve_config(pytestconfig.rootpath, pytestconfig.getini(INI_OPTION))
    return acquire(config)
