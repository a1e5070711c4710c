from collections import Counter

import pytest

from samplers import NumpySampler, RandomSampler, TorchSampler, make_sampler

ALL_KINDS = ["random", "numpy", "torch"]


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_single_choice_always_returned(kind):
    sampler = make_sampler(kind, seed=0)
    for _ in range(20):
        assert sampler.choose([(7, "only")]) == "only"


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_same_seed_same_draws(kind):
    weighted = [(1, "a"), (2, "b"), (3, "c")]
    a = make_sampler(kind, seed=123)
    b = make_sampler(kind, seed=123)
    assert [a.choose(weighted) for _ in range(50)] == [b.choose(weighted) for _ in range(50)]


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_draws_follow_weights(kind):
    sampler = make_sampler(kind, seed=7)
    weighted = [(1, "rare"), (9, "common")]
    counts = Counter(sampler.choose(weighted) for _ in range(4000))
    assert set(counts) <= {"rare", "common"}
    assert 0.05 < counts["rare"] / 4000 < 0.15


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_rejects_bad_input(kind):
    sampler = make_sampler(kind, seed=0)
    with pytest.raises(ValueError):
        sampler.choose([])
    with pytest.raises(ValueError):
        sampler.choose([(0, "a"), (1, "b")])
    with pytest.raises(ValueError):
        sampler.choose([(-1, "a")])


def test_random_sampler_covers_whole_range():
    # randrange(3) hits 0, 1 and 2; each maps to exactly one bucket
    class Fixed:
        def __init__(self, values):
            self.values = list(values)

        def randrange(self, stop):
            assert stop == 3
            return self.values.pop(0)

    sampler = RandomSampler(rng=Fixed([0, 1, 2]))
    weighted = [(1, "a"), (2, "b")]
    assert [sampler.choose(weighted) for _ in range(3)] == ["a", "b", "b"]


def test_numpy_sampler_bucket_edges():
    class Fixed:
        def __init__(self, values):
            self.values = list(values)

        def integers(self, low, high):
            assert (low, high) == (0, 3)
            return self.values.pop(0)

    sampler = NumpySampler(rng=Fixed([0, 1, 2]))
    weighted = [(1, "a"), (2, "b")]
    assert [sampler.choose(weighted) for _ in range(3)] == ["a", "b", "b"]


def test_torch_sampler_accepts_generator():
    import torch

    g = torch.Generator()
    g.manual_seed(5)
    sampler = TorchSampler(generator=g)
    assert sampler.choose([(3, "x"), (4, "y")]) in {"x", "y"}


def test_unknown_kind():
    with pytest.raises(ValueError):
        make_sampler("dice")
