"""Find and run the executables built by 'cargo build' from Python tests.

    from bintest import BinTest

    def test_help():
        executables = BinTest.new()
        for name, path in executables.list_executables():
            print(name, path)
        result = executables.command("mytool").arg("--help").output()
        assert result.returncode == 0
"""

__version__ = "2.0.1"

from bintest.config import RELEASE_BUILD, BinTestBuilder, BuildConfig, load_config
from bintest.registry import BinTest, acquire
from bintest.runner import Command
from bintest.utils.errors import (
    BinTestError,
    BuildFailedError,
    BuilderMisuseError,
    ConfigurationConflictError,
    MalformedMessageError,
    ToolchainUnavailableError,
    UnknownExecutableError,
)

__all__ = [
    "__version__",
    "BinTest",
    "BinTestBuilder",
    "BuildConfig",
    "Command",
    "RELEASE_BUILD",
    "acquire",
    "load_config",
    "BinTestError",
    "BuildFailedError",
    "BuilderMisuseError",
    "ConfigurationConflictError",
    "MalformedMessageError",
    "ToolchainUnavailableError",
    "UnknownExecutableError",
]
