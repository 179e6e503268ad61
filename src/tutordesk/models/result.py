"""
Result<T> wrapper for best-effort operations.

Persistence saves and schedule exports report their outcome through
Result instead of raising, so callers on the UI thread never have to
guard them with try/except.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar


T = TypeVar('T')


class ResultStatus(Enum):
    """Status of a Result."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class Result(Generic[T]):
    """
    Outcome of an operation that may fail without raising.

    Attributes:
        status: SUCCESS or FAILURE
        value: Payload on success (e.g. the path that was written)
        error: Exception that caused the failure, if any
        message: Human-readable description

    Examples:
        >>> result = gateway.save(store.state)
        >>> if result.is_failure:
        ...     logger.warning(result.message)

        >>> path = store.export_sessions(Path("out.csv")).unwrap_or(None)
    """

    status: ResultStatus
    value: Optional[T] = None
    error: Optional[Exception] = None
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == ResultStatus.FAILURE

    @classmethod
    def success(cls, value: T, message: Optional[str] = None) -> 'Result[T]':
        """Create a successful result carrying value."""
        return cls(status=ResultStatus.SUCCESS, value=value, message=message)

    @classmethod
    def failure(
        cls,
        message: str,
        error: Optional[Exception] = None
    ) -> 'Result[T]':
        """Create a failed result with a message and optional cause."""
        return cls(status=ResultStatus.FAILURE, message=message, error=error)

    def unwrap(self) -> T:
        """
        Return the value of a successful result.

        Raises:
            ValueError: If the result is a failure
        """
        if self.is_failure:
            raise ValueError(f"Cannot unwrap failure result: {self.message}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return the value on success, default otherwise."""
        return self.value if self.is_success else default
