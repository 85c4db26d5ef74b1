"""
Result Type - Success value or structured error.

Definition, validation and dependency operations return a Result instead
of raising, so callers can inspect every failure without try/except.
A Result is truthy exactly when it succeeded.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an operation.

    Attributes:
        ok: Whether the operation succeeded
        value: Value produced on success
        error: Exception describing the failure
    """

    ok: bool
    value: T | None = None
    error: Exception | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Result":
        return cls(ok=False, error=error)

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> T:
        """
        Return the value, raising the carried error on failure.

        Raises:
            Exception: The error this Result carries
        """
        if not self.ok:
            raise self.error
        return self.value

    @property
    def message(self) -> str | None:
        """Error message, or None on success."""
        return None if self.error is None else str(self.error)
