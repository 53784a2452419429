#!/usr/bin/env python3
"""バックオフのテスト"""
import random

import pytest

from ceph_s3.models.config import RetryPolicy
from ceph_s3.core.backoff import FibonacciBackoff


def test_fibonacci_sequence():
    backoff = FibonacciBackoff(initial_delay=1.0, max_delay=600.0)

    assert [backoff.next() for _ in range(7)] == [1.0, 1.0, 2.0, 3.0, 5.0, 8.0, 13.0]


def test_base_delay_matches_next():
    backoff = FibonacciBackoff(initial_delay=0.5, max_delay=10.0)

    expected = [backoff.base_delay(n) for n in range(10)]
    backoff.reset()

    assert [backoff.next() for _ in range(10)] == expected


def test_base_delay_is_non_decreasing_and_capped():
    backoff = FibonacciBackoff(initial_delay=1.0, max_delay=20.0)

    delays = [backoff.base_delay(n) for n in range(30)]

    assert delays == sorted(delays)
    assert max(delays) == 20.0


def test_initial_delay_above_max_is_capped():
    backoff = FibonacciBackoff(initial_delay=10.0, max_delay=3.0)

    assert backoff.next() == 3.0
    assert backoff.base_delay(5) == 3.0


def test_reset():
    backoff = FibonacciBackoff(initial_delay=1.0)
    for _ in range(5):
        backoff.next()

    backoff.reset()

    assert backoff.next() == 1.0


def test_jitter_stays_within_bounds():
    backoff = FibonacciBackoff(initial_delay=1.0, max_delay=30.0, jitter_factor=1.0,
                               rng=random.Random(1234))

    for n in range(200):
        base = backoff.base_delay(n)
        delay = backoff.next()
        assert 0.0 <= delay <= 30.0
        assert abs(delay - base) <= base + 1e-9


def test_jitter_varies_delay():
    backoff = FibonacciBackoff(initial_delay=10.0, jitter_factor=0.3, rng=random.Random(7))

    delays = {backoff.next() for _ in range(2)}

    assert all(7.0 <= d <= 13.0 for d in delays)
    assert delays != {10.0}


def test_from_policy():
    backoff = FibonacciBackoff.from_policy(RetryPolicy(initial_delay=2.0, max_delay=4.0, jitter_factor=0))

    assert [backoff.next() for _ in range(4)] == [2.0, 2.0, 4.0, 4.0]


def test_invalid_arguments():
    with pytest.raises(ValueError):
        FibonacciBackoff(jitter_factor=2.0)
    with pytest.raises(ValueError):
        FibonacciBackoff(initial_delay=-1.0)
    with pytest.raises(ValueError):
        FibonacciBackoff().base_delay(-1)
