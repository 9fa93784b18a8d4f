"""
Result type shared by use cases.

Use cases return ``Result`` values instead of raising for expected failures:

    return Return.ok(value)
    return Return.err(Error("CODE", "Human readable message"))
"""

from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class Error:
    """Error payload carried by a failed Result"""

    __slots__ = ("code", "message", "reason", "details")

    def __init__(
        self, code: str, message: str, reason: Optional[str] = None, **details: Any
    ):
        self.code = code
        self.message = message
        self.reason = reason
        self.details: Dict[str, Any] = details

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Error):
            return NotImplemented
        return (self.code, self.message, self.reason, self.details) == (
            other.code,
            other.message,
            other.reason,
            other.details,
        )

    def __repr__(self) -> str:
        return f"Error(code={self.code!r}, message={self.message!r})"


class Result(Generic[T]):
    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Error:
        if self._error is None:
            raise ValueError("Result is not an error")
        return self._error

    def __repr__(self) -> str:
        if self.is_err():
            return f"Result(error={self._error!r})"
        return f"Result(value={self._value!r})"


class Return:
    @staticmethod
    def ok(value: Optional[T] = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result[Any]:
        return Result(error=error)
