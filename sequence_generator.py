from __future__ import annotations

from typing import List, Optional

from elements import END, START, Element, T, Value
from samplers import RandomSampler, WeightedSampler
from transition_graph import TransitionGraph


def generate(
    graph: TransitionGraph[T],
    max_length: int,
    sampler: Optional[WeightedSampler] = None,
) -> List[T]:
    """Weighted random walk from START.

    Each step draws the next element with weight equal to its raw transition
    count from the current element. The walk stops when END is drawn (END is
    not emitted) or after ``max_length`` draws. An element with no outgoing
    transitions is treated as leading to END, so an untrained graph yields [].
    """
    if max_length < 0:
        raise ValueError("max_length must be non-negative")
    if sampler is None:
        sampler = RandomSampler()

    current: Element = START
    output: List[T] = []
    for _ in range(max_length):
        counts = graph.transition_counts(current)
        if not counts:
            counts = [(END, 1)]
        nxt = sampler.choose([(c, el) for el, c in counts])
        if nxt is END:
            break
        if isinstance(nxt, Value):
            output.append(nxt.payload)
        # a raw add may lead back to START; it emits nothing
        current = nxt
    return output


def generate_many(
    graph: TransitionGraph[T],
    count: int,
    max_length: int,
    sampler: Optional[WeightedSampler] = None,
) -> List[List[T]]:
    if count < 0:
        raise ValueError("count must be non-negative")
    if sampler is None:
        sampler = RandomSampler()
    return [generate(graph, max_length, sampler) for _ in range(count)]
