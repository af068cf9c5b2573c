"""Utility modules for storyarch."""

from storyarch.utils.atomic import AtomicWriteError, atomic_write_bytes
from storyarch.utils.logging import (
    configure_logging,
    get_correlation_id,
    get_logger,
    set_command,
)
from storyarch.utils.result import (
    ConfigError,
    Err,
    ErrorKind,
    ExitCode,
    Ok,
    RegistryError,
    Result,
    ResultError,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_correlation_id",
    "set_command",
    # Atomic writes
    "AtomicWriteError",
    "atomic_write_bytes",
    # Results
    "Ok",
    "Err",
    "Result",
    "ResultError",
    "ErrorKind",
    "RegistryError",
    "ConfigError",
    "ExitCode",
]
