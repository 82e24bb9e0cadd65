import itertools
import random

import pytest

from konverge._core.actions.retrying import exponential, fixed, jittered


def test_fixed_delays_repeat_forever():
    delays = list(itertools.islice(fixed(5), 4))
    assert delays == [5, 5, 5, 5]


def test_exponential_delays_grow():
    delays = list(itertools.islice(exponential(1), 5))
    assert delays == [1, 2, 4, 8, 16]


def test_exponential_delays_with_custom_factor():
    delays = list(itertools.islice(exponential(2, factor=3), 3))
    assert delays == [2, 6, 18]


def test_exponential_delays_are_capped():
    delays = list(itertools.islice(exponential(1, maximum=5), 6))
    assert delays == [1, 2, 4, 5, 5, 5]


@pytest.mark.parametrize('seed', [0, 1, 42])
def test_jittered_delays_stay_within_the_spread(seed):
    delays = list(jittered([10] * 100, 2, rng=random.Random(seed)))
    assert len(delays) == 100
    assert all(8 <= delay <= 12 for delay in delays)
    assert len(set(delays)) > 1


def test_jittered_delays_are_never_negative():
    delays = list(jittered([0.1] * 100, 5, rng=random.Random(123)))
    assert all(delay >= 0 for delay in delays)


def test_jittered_delays_are_reproducible_with_the_same_seed():
    delays1 = list(jittered([10, 20, 30], 1, rng=random.Random(7)))
    delays2 = list(jittered([10, 20, 30], 1, rng=random.Random(7)))
    assert delays1 == delays2


def test_jittered_delays_follow_the_source_length():
    delays = list(jittered([], 1))
    assert delays == []
