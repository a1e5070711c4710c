from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence, Tuple, TypeVar

import numpy as np
import torch

X = TypeVar("X")


class WeightedSampler(Protocol):
    """Draws one item from a non-empty list of ``(weight, item)`` pairs.

    Weights are raw positive integer counts; an item is returned with
    probability ``weight / sum(weights)``.
    """

    def choose(self, weighted: Sequence[Tuple[int, X]]) -> X:
        ...


def _check_weights(weighted: Sequence[Tuple[int, X]]) -> List[int]:
    if not weighted:
        raise ValueError("weighted choices must be non-empty")
    weights = [w for w, _ in weighted]
    for w in weights:
        if w <= 0:
            raise ValueError(f"weights must be positive, got {w}")
    return weights


class RandomSampler:
    """Exact integer draw backed by ``random.Random``."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random(seed)

    def choose(self, weighted: Sequence[Tuple[int, X]]) -> X:
        weights = _check_weights(weighted)
        r = self.rng.randrange(sum(weights))
        acc = 0
        for w, (_, item) in zip(weights, weighted):
            acc += w
            if r < acc:
                return item
        return weighted[-1][1]


class NumpySampler:
    """Exact integer draw backed by ``numpy.random.Generator``."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def choose(self, weighted: Sequence[Tuple[int, X]]) -> X:
        weights = _check_weights(weighted)
        cumulative = np.cumsum(np.asarray(weights, dtype=np.int64))
        r = int(self.rng.integers(0, int(cumulative[-1])))
        index = int(np.searchsorted(cumulative, r, side="right"))
        return weighted[index][1]


class TorchSampler:
    """Draw via ``torch.multinomial``, which takes unnormalized weights."""

    def __init__(self, seed: Optional[int] = None, generator: Optional[torch.Generator] = None) -> None:
        if generator is None:
            generator = torch.Generator()
            if seed is not None:
                generator.manual_seed(seed)
            else:
                generator.seed()
        self.generator = generator

    def choose(self, weighted: Sequence[Tuple[int, X]]) -> X:
        weights = _check_weights(weighted)
        probs = torch.tensor(weights, dtype=torch.float64)
        index = int(torch.multinomial(probs, num_samples=1, generator=self.generator).item())
        return weighted[index][1]


SAMPLER_KINDS = ("random", "numpy", "torch")


def make_sampler(kind: str = "random", seed: Optional[int] = None) -> WeightedSampler:
    if kind == "random":
        return RandomSampler(seed)
    if kind == "numpy":
        return NumpySampler(seed)
    if kind == "torch":
        return TorchSampler(seed)
    raise ValueError(f"Unknown sampler kind: {kind!r} (expected one of {', '.join(SAMPLER_KINDS)})")
