"""Tests for the backoff calculator"""

import random

import pytest
from tenacity import RetryCallState

from deepl_cli.domain.config.retry import RetryConfig
from deepl_cli.infrastructure.backoff import compute_backoff, wait_jittered_exponential

PARAMS = dict(initial_delay=1.0, backoff_multiplier=1.6, max_delay=120.0, jitter=0.23)


class TestComputeBackoff:
    """Tests for compute_backoff"""

    def test_first_retry_without_jitter_draw(self):
        assert compute_backoff(0, **PARAMS, draw=0.0) == pytest.approx(1.0)

    def test_grows_by_factor(self):
        assert compute_backoff(1, **PARAMS, draw=0.0) == pytest.approx(1.6)
        assert compute_backoff(3, **PARAMS, draw=0.0) == pytest.approx(1.6 ** 3)

    def test_capped_before_jitter(self):
        assert compute_backoff(50, **PARAMS, draw=0.0) == pytest.approx(120.0)
        assert compute_backoff(50, **PARAMS, draw=0.5) == pytest.approx(120.0 * (1 + 0.23 * 0.5))

    def test_deterministic_with_draw(self):
        a = compute_backoff(4, **PARAMS, draw=-0.7)
        b = compute_backoff(4, **PARAMS, draw=-0.7)
        assert a == b
        assert a == pytest.approx(1.6 ** 4 * (1 - 0.23 * 0.7))

    def test_negative_attempt_returns_initial_delay(self):
        assert compute_backoff(-1, **PARAMS) == 1.0
        assert compute_backoff(-5, **dict(PARAMS, initial_delay=2.5)) == 2.5

    def test_no_jitter_is_exact(self):
        params = dict(PARAMS, jitter=0.0)
        assert compute_backoff(2, **params) == pytest.approx(2.56)

    def test_random_delays_stay_in_bounds(self):
        random.seed(1234)
        for n in range(0, 20):
            raw = min(1.0 * 1.6 ** n, 120.0)
            for _ in range(50):
                delay = compute_backoff(n, **PARAMS)
                assert raw * (1 - 0.23) <= delay <= raw * (1 + 0.23)
                assert delay <= 120.0 * (1 + 0.23)
                assert delay >= 0.0


class TestWaitJitteredExponential:
    """Tests for the tenacity wait adapter"""

    def test_uses_zero_based_attempt_index(self):
        config = RetryConfig(initial_delay=2.0, backoff_multiplier=3.0, max_delay=100.0, jitter=0.0)
        wait = wait_jittered_exponential(config)
        state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})

        state.attempt_number = 1
        assert wait(state) == pytest.approx(2.0)
        state.attempt_number = 3
        assert wait(state) == pytest.approx(18.0)
