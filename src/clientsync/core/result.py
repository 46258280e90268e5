"""
Result type for explicit success/failure values.

Compensating actions return a Result instead of raising so the ledger can
attempt every rollback and inspect each outcome independently.

Example:
    >>> def parse_row(value: str) -> Result[int, str]:
    ...     if value.isdigit():
    ...         return Ok(int(value))
    ...     return Err(f"not a row number: {value}")
    >>> parse_row("42").unwrap()
    42
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, Generic, NoReturn, TypeVar


T = TypeVar("T")
E = TypeVar("E")


class ResultError(Exception):
    """Raised when unwrapping the wrong variant of a Result."""

    def __init__(self, message: str, error: Any = None) -> None:
        super().__init__(message)
        self.error = error


class Result(ABC, Generic[T, E]):
    """Base class for Ok and Err."""

    __slots__ = ()

    @abstractmethod
    def is_ok(self) -> bool: ...

    def is_err(self) -> bool:
        return not self.is_ok()

    @abstractmethod
    def unwrap(self) -> T: ...

    @abstractmethod
    def unwrap_err(self) -> E: ...

    def __bool__(self) -> bool:
        return self.is_ok()

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @staticmethod
    def try_call(
        fn: Callable[[], T],
        error_factory: Callable[[Exception], Any] | None = None,
    ) -> Result[T, Any]:
        """
        Run fn and capture any Exception as Err.

        Args:
            fn: Zero-argument callable.
            error_factory: Optional mapping applied to the caught exception.
        """
        try:
            return Ok(fn())
        except Exception as e:
            return Err(error_factory(e) if error_factory else e)

    @staticmethod
    def collect_all(results: Iterable[Result[T, E]]) -> Result[list[T], list[E]]:
        """Combine results, gathering every error rather than stopping at the first."""
        values: list[T] = []
        errors: list[E] = []
        for result in results:
            if result.is_ok():
                values.append(result.unwrap())
            else:
                errors.append(result.unwrap_err())
        if errors:
            return Err(errors)
        return Ok(values)


class Ok(Result[T, Any]):
    """Successful result."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self._value

    def unwrap_err(self) -> NoReturn:
        raise ResultError("Called unwrap_err on Ok", self._value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Ok) and self._value == other._value

    def __hash__(self) -> int:
        return hash(("Ok", self._value))

    def __repr__(self) -> str:
        return f"Ok({self._value!r})"


class Err(Result[Any, E]):
    """Failed result."""

    __slots__ = ("_error",)

    def __init__(self, error: E) -> None:
        self._error = error

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise ResultError(f"Called unwrap on Err: {self._error!r}", self._error)

    def unwrap_err(self) -> E:
        return self._error

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Err) and self._error == other._error

    def __hash__(self) -> int:
        return hash(("Err", repr(self._error)))

    def __repr__(self) -> str:
        return f"Err({self._error!r})"


__all__ = ["Err", "Ok", "Result", "ResultError"]
