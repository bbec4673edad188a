"""
Minimal Ok/Err result types used by ``Runtime.run_safe``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Outcome of a run: ``Ok(value)`` or ``Err(error)``."""

    __slots__ = ()

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def ok(self) -> T_co | None:
        if isinstance(self, Ok):
            return self.value
        return None

    def err(self) -> Exception | None:
        if isinstance(self, Err):
            return self.error
        return None

    def unwrap(self) -> T_co:
        """Return the run's output or re-raise the error that ended it."""
        if isinstance(self, Ok):
            return self.value
        raise self.error

    def unwrap_err(self) -> Exception:
        """Return the error that ended the run."""
        if isinstance(self, Err):
            return self.error
        raise RuntimeError("unwrap_err() called on a successful run")


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    """Success result."""
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    """Error result."""
    error: Exception


__all__ = ["Result", "Ok", "Err"]
