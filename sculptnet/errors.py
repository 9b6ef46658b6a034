"""
Recorder results and error kinds.

Lifecycle calls that can violate recorder state return a RecorderResult
instead of raising, in the same way generation requests report
success/error. Callers branch on `success` and `error_kind`, or call
`unwrap()` to get the value or a raised RecorderError.
"""

from typing import Any, Generic, Optional, TypeVar
from dataclasses import dataclass
from enum import Enum


T = TypeVar('T')


class ErrorKind(Enum):
    """Failure categories for recorder lifecycle calls."""
    INVALID_STATE = 'invalid_state'
    INVALID_ARGUMENT = 'invalid_argument'
    IMPORT_FAILED = 'import_failed'


# Messages shared between the recorder, serializer and tests
NOT_RECORDING_MESSAGE = "No recording in progress"
IMPORT_FAILED_MESSAGE = "Failed to import session"


class RecorderError(Exception):
    """Raised by RecorderResult.unwrap() for failed results."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class RecorderResult(Generic[T]):
    """Outcome of a recorder lifecycle call."""
    success: bool
    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None) -> 'RecorderResult':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> 'RecorderResult':
        return cls(success=False, error_kind=kind, error=message)

    def unwrap(self) -> T:
        """
        Return the value of a successful result.

        Raises:
            RecorderError: carrying the error kind and message on failure
        """
        if not self.success:
            raise RecorderError(self.error_kind, self.error)
        return self.value

    def __bool__(self) -> bool:
        return self.success
