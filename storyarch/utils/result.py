"""Result type for explicit error handling.

Registry operations return ``Ok`` or ``Err`` instead of raising for expected
failures, so callers always see which kind of failure occurred and state is
never left half-mutated by stack unwinding.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, NoReturn, TypeVar, Union

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


class ResultError(Exception):
    """Raised when unwrapping a Result fails."""

    pass


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Represents a successful result."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value. Safe to call since this is Ok."""
        return self.value

    def unwrap_err(self) -> NoReturn:
        """Get the error value. Raises since this is Ok."""
        raise ResultError(f"Called unwrap_err on Ok value: {self.value}")

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Generic[E]):
    """Represents an error result."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Get the success value. Raises since this is Err."""
        raise ResultError(f"Called unwrap on Err value: {self.error}")

    def unwrap_err(self) -> E:
        """Get the error value. Safe to call since this is Err."""
        return self.error

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Union[Ok[T], Err[E]]


class ErrorKind(str, Enum):
    """Failure categories reported by the project registry."""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    IO_FAILURE = "io_failure"
    CORRUPT_SNAPSHOT = "corrupt_snapshot"


@dataclass(frozen=True)
class RegistryError:
    """Error from a registry operation."""

    kind: ErrorKind
    message: str
    cause: Exception | None = None

    def __str__(self) -> str:
        if self.cause:
            return f"[{self.kind.value}] {self.message}: {self.cause}"
        return f"[{self.kind.value}] {self.message}"


@dataclass(frozen=True)
class ConfigError:
    """Error in configuration."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"Config error in '{self.field}': {self.message}"


# Exit codes
class ExitCode:
    """Exit codes for CLI."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 2

    # Registry errors (10-19)
    INVALID_ARGUMENT = 10
    NOT_FOUND = 11
    PERMISSION_DENIED = 12

    # Storage errors (20-29)
    IO_FAILURE = 20
    CORRUPT_SNAPSHOT = 21

    @classmethod
    def for_kind(cls, kind: ErrorKind) -> int:
        """Map a registry error kind to its exit code."""
        return getattr(cls, kind.name, cls.GENERAL_ERROR)
