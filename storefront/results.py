# Result type for operations that can fail without raising.
# Err holds the failure (a RemoteError for gateway calls), Ok holds the value.

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """
    Ok/Err wrapper.

    Factories: Result.ok(value), Result.err(error)
    Methods: map, bind, get_or_else; is_ok / is_err predicates.
    """

    is_err: bool
    value: Union[T, E]

    @staticmethod
    def ok(value: T) -> "Result[T, E]":
        return Result(False, value)

    @staticmethod
    def err(error: E) -> "Result[T, E]":
        return Result(True, error)

    @property
    def is_ok(self) -> bool:
        return not self.is_err

    @property
    def error(self) -> E:
        if not self.is_err:
            raise ValueError("Result is Ok")
        return self.value  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        return Result.ok(fn(self.value)) if self.is_ok else self  # type: ignore[return-value]

    def bind(self, fn: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        return fn(self.value) if self.is_ok else self  # type: ignore[return-value]

    def get_or_else(self, default: U) -> T | U:
        return self.value if self.is_ok else default  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Err({self.value})" if self.is_err else f"Ok({self.value})"
