from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Hashable, Tuple, TypeVar, Union

T = TypeVar("T")


class Sentinel(Enum):
    """Synthetic sequence boundaries. Never supplied by callers as tokens."""

    START = "start"
    END = "end"

    def __repr__(self) -> str:
        return f"Sentinel.{self.name}"


START = Sentinel.START
END = Sentinel.END


@dataclass(frozen=True)
class Value(Generic[T]):
    """A caller token wrapped as a graph element."""

    payload: T


Element = Union[Sentinel, Value[T]]
KeyFn = Callable[[Any], Hashable]

START_KEY: Tuple[int] = (0,)
END_KEY: Tuple[int] = (2,)


def _identity(payload: Any) -> Hashable:
    return payload


@dataclass(frozen=True)
class TaggedKey:
    """Key mapping that tags every element with its variant.

    Sentinels get fixed one-element tuples and values get ``(1, value_key(v))``,
    so a value key can never collide with START_KEY or END_KEY. Injectivity
    over values is still up to ``value_key``.
    """

    value_key: Callable[[Any], Hashable] = _identity

    def __call__(self, element: Element) -> Hashable:
        if element is START:
            return START_KEY
        if element is END:
            return END_KEY
        if isinstance(element, Value):
            return (1, self.value_key(element.payload))
        raise TypeError(f"Not a graph element: {element!r}")


def wrap(tokens) -> list:
    """Bracket raw tokens with START/END: [START, Value(t0), ..., END]."""
    return [START, *(Value(token) for token in tokens), END]
