from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

from elements import Element, T, wrap
from transition_graph import TransitionGraph


def sequence_log_prob(graph: TransitionGraph[T], tokens: Sequence[T]) -> float:
    """Natural-log probability of START, tokens..., END under ``graph``.

    There is no smoothing: any unseen transition gives -inf.
    """
    chain = wrap(tokens)
    probs = np.array([graph.probability(a, b) for a, b in zip(chain, chain[1:])], dtype=np.float64)
    if np.any(probs == 0.0):
        return float("-inf")
    return float(np.sum(np.log(probs)))


def perplexity(graph: TransitionGraph[T], sequences: Iterable[Sequence[T]]) -> float:
    """Per-transition perplexity over non-empty sequences (inf if any is impossible)."""
    total_log_prob = 0.0
    n_transitions = 0
    for tokens in sequences:
        tokens = list(tokens)
        if not tokens:
            continue
        total_log_prob += sequence_log_prob(graph, tokens)
        n_transitions += len(tokens) + 1
    if n_transitions == 0:
        raise ValueError("perplexity needs at least one non-empty sequence")
    if np.isneginf(total_log_prob):
        return float("inf")
    return float(np.exp(-total_log_prob / n_transitions))


def transition_entropy(graph: TransitionGraph[T], from_el: Element) -> float:
    """Shannon entropy in nats of the outgoing distribution of ``from_el``."""
    probs = np.array([p for _, p in graph.transition_probabilities(from_el)], dtype=np.float64)
    if probs.size == 0:
        return 0.0
    return float(-np.sum(probs * np.log(probs)))


def top_transitions(graph: TransitionGraph[T], n: int = 10) -> List[Tuple[Element, Element, int]]:
    """Most frequent transitions, ties in first-seen order."""
    return sorted(graph.transitions(), key=lambda t: t[2], reverse=True)[:n]
