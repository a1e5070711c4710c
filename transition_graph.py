from __future__ import annotations

from typing import Dict, Generic, Hashable, Iterator, List, Optional, Set, Tuple

from elements import Element, KeyFn, T, TaggedKey, Value


class KeyCollisionError(ValueError):
    """The key mapping sent two different elements to the same key."""


class TransitionGraph(Generic[T]):
    """Sparse first-order transition counts over graph elements.

    Counts live in a two-level mapping ``key(from) -> key(to) -> count``.
    Every stored count is >= 1; a missing entry means zero. The key function
    is fixed at construction and used for every lookup.
    """

    def __init__(self, key: Optional[KeyFn] = None, *, check_keys: bool = True) -> None:
        self.key: KeyFn = key if key is not None else TaggedKey()
        self.check_keys = check_keys
        self._counts: Dict[Hashable, Dict[Hashable, int]] = {}
        # key -> element, for turning stored keys back into elements
        self._elements: Dict[Hashable, Element] = {}

    def _check(self, element: Element) -> Hashable:
        k = self.key(element)
        known = self._elements.get(k)
        if known is not None and self.check_keys and known != element:
            raise KeyCollisionError(f"Elements {known!r} and {element!r} share key {k!r}")
        return k

    def _record(self, from_el: Element, to_el: Element, count: int) -> None:
        # both keys are checked before anything is written
        kf = self._check(from_el)
        kt = self._check(to_el)
        if kf == kt and self.check_keys and from_el != to_el:
            raise KeyCollisionError(f"Elements {from_el!r} and {to_el!r} share key {kf!r}")
        self._elements.setdefault(kf, from_el)
        self._elements.setdefault(kt, to_el)
        row = self._counts.setdefault(kf, {})
        row[kt] = row.get(kt, 0) + count

    def add(self, from_el: Element, to_el: Element) -> "TransitionGraph[T]":
        """Count one occurrence of ``from_el -> to_el``. Returns self."""
        self._record(from_el, to_el, 1)
        return self

    def load_count(self, from_el: Element, to_el: Element, count: int) -> "TransitionGraph[T]":
        """Add ``count`` occurrences at once; used when rebuilding a decoded graph."""
        if count < 0:
            raise ValueError("count must be non-negative")
        if count > 0:
            self._record(from_el, to_el, count)
        return self

    def get_count(self, from_el: Element, to_el: Element) -> int:
        row = self._counts.get(self.key(from_el))
        if row is None:
            return 0
        return row.get(self.key(to_el), 0)

    def total_outgoing(self, from_el: Element) -> int:
        row = self._counts.get(self.key(from_el))
        return sum(row.values()) if row else 0

    def transition_counts(self, from_el: Element) -> List[Tuple[Element, int]]:
        """Raw ``(to, count)`` pairs in first-seen order. Empty if none."""
        row = self._counts.get(self.key(from_el))
        if not row:
            return []
        return [(self._elements[k], c) for k, c in row.items()]

    def transition_probabilities(self, from_el: Element) -> List[Tuple[Element, float]]:
        """Normalized ``(to, probability)`` pairs.

        Only reachable elements are listed, and their probabilities sum to 1.0
        up to rounding. An element with no outgoing transitions gives an empty
        list rather than an error.
        """
        counts = self.transition_counts(from_el)
        total = sum(c for _, c in counts)
        return [(el, c / total) for el, c in counts]

    def probability(self, from_el: Element, to_el: Element) -> float:
        total = self.total_outgoing(from_el)
        if total == 0:
            return 0.0
        return self.get_count(from_el, to_el) / total

    def alphabet(self) -> Set[T]:
        """Payloads seen on either side of any transition, sentinels excluded."""
        return {el.payload for el in self._elements.values() if isinstance(el, Value)}

    def transitions(self) -> Iterator[Tuple[Element, Element, int]]:
        for kf, row in self._counts.items():
            from_el = self._elements[kf]
            for kt, c in row.items():
                yield from_el, self._elements[kt], c

    def sources(self) -> List[Element]:
        """Elements with at least one outgoing transition."""
        return [self._elements[k] for k in self._counts]

    @property
    def num_transitions(self) -> int:
        return sum(len(row) for row in self._counts.values())

    @property
    def total_count(self) -> int:
        return sum(sum(row.values()) for row in self._counts.values())

    def is_empty(self) -> bool:
        return not self._counts

    def copy(self) -> "TransitionGraph[T]":
        other: TransitionGraph[T] = TransitionGraph(self.key, check_keys=self.check_keys)
        other._counts = {kf: dict(row) for kf, row in self._counts.items()}
        other._elements = dict(self._elements)
        return other

    def __contains__(self, element: Element) -> bool:
        return self.key(element) in self._counts

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransitionGraph):
            return NotImplemented
        return self._counts == other._counts

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"TransitionGraph(sources={len(self._counts)}, "
            f"transitions={self.num_transitions}, total={self.total_count})"
        )
