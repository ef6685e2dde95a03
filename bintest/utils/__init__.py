"""Utility modules for bintest."""

from bintest.utils.errors import (
    BinTestError,
    BuildFailedError,
    BuilderMisuseError,
    ConfigurationConflictError,
    MalformedMessageError,
    ToolchainUnavailableError,
    UnknownExecutableError,
)
from bintest.utils.logging import (
    configure_logging,
    get_logger,
    new_build_id,
)
from bintest.utils.result import ConfigError, Err, Ok, Result, ResultError

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "new_build_id",
    # Results
    "Ok",
    "Err",
    "Result",
    "ResultError",
    "ConfigError",
    # Errors
    "BinTestError",
    "BuilderMisuseError",
    "BuildFailedError",
    "ConfigurationConflictError",
    "MalformedMessageError",
    "ToolchainUnavailableError",
    "UnknownExecutableError",
]
