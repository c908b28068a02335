"""
Test Pool Sampler
Cardinality, uniqueness and membership of pool draws.
"""
import random

import pytest

from exams.services.sampler import PoolSampler, SeededPoolSampler


POOL = [f"q{i}" for i in range(10)]


@pytest.mark.parametrize("count", [1, 5, 10])
def test_sample_cardinality_and_membership(sampler, count):
    """Draws min(P, K) distinct ids, all from the pool."""
    picked = sampler.sample(POOL, count)
    assert len(picked) == count
    assert len(set(picked)) == len(picked)
    assert set(picked) <= set(POOL)


def test_sample_larger_than_pool_returns_whole_pool(sampler):
    picked = sampler.sample(POOL[:3], 8)
    assert sorted(picked) == sorted(POOL[:3])


@pytest.mark.parametrize("pool, count", [([], 3), (POOL, 0), (POOL, -2)])
def test_sample_empty_cases_never_error(sampler, pool, count):
    assert sampler.sample(pool, count) == []


def test_sample_does_not_mutate_pool(sampler):
    pool = list(POOL)
    sampler.sample(pool, 4)
    sampler.shuffle(pool)
    assert pool == POOL


def test_shuffle_keeps_members(sampler):
    shuffled = sampler.shuffle(POOL)
    assert sorted(shuffled) == sorted(POOL)


def test_injected_random_source_is_used():
    """Two samplers over equal random sources make equal draws."""
    a = PoolSampler(random.Random(7)).sample(POOL, 5)
    b = PoolSampler(random.Random(7)).sample(POOL, 5)
    assert a == b


def test_seeded_sampler_is_reproducible():
    a = SeededPoolSampler("bp-1:42")
    b = SeededPoolSampler("bp-1:42")
    assert a.sample(POOL, 4) == b.sample(POOL, 4)
    assert a.shuffle(POOL) == b.shuffle(POOL)


def test_samplers_do_not_share_state():
    """Each sampler owns its random source; the module-level RNG is untouched."""
    random.seed(99)
    expected = random.random()
    random.seed(99)
    PoolSampler().sample(POOL, 5)
    SeededPoolSampler("x").shuffle(POOL)
    assert random.random() == expected
