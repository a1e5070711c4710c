from __future__ import annotations

from typing import Iterable, Sequence

from elements import T, wrap
from transition_graph import TransitionGraph

try:
    from tqdm import tqdm  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    tqdm = None  # type: ignore


def train(tokens: Iterable[T], graph: TransitionGraph[T]) -> TransitionGraph[T]:
    """Fold one token sequence into ``graph`` and return it.

    The tokens are bracketed as START, t0, ..., tn, END and every consecutive
    pair is counted once. An empty sequence leaves the graph untouched, so no
    bare START -> END transition is ever recorded.
    """
    chain = wrap(tokens)
    if len(chain) == 2:
        return graph
    for from_el, to_el in zip(chain, chain[1:]):
        graph.add(from_el, to_el)
    return graph


def train_batch(
    sequences: Iterable[Sequence[T]],
    graph: TransitionGraph[T],
    *,
    progress: bool = False,
) -> TransitionGraph[T]:
    """Train on each sequence independently; nothing links one to the next."""
    iterator = sequences
    if progress and tqdm is not None:
        iterator = tqdm(sequences, desc="train", unit="seq", ncols=0)
    for tokens in iterator:
        train(tokens, graph)
    return graph
