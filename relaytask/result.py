"""
Tagged outcomes carried across every composition boundary.

A completed frame produces ``Ok(value)`` or ``Err(exception)``; composers
receive the value at their ``yield`` or have the exception thrown there, and
drivers read the root outcome with ``is_ok``/``is_err``/``unwrap``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Either ``Ok`` or ``Err``; truthy when it holds a value."""

    __slots__ = ()

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def unwrap(self) -> T_co:
        """Return the value or raise the stored error."""
        raise NotImplementedError

    def __bool__(self) -> bool:
        return self.is_ok()


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    error: BaseException

    def unwrap(self) -> NoReturn:
        raise self.error


__all__ = [
    "Err",
    "Ok",
    "Result",
]
