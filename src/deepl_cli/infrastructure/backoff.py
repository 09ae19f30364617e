"""Exponential backoff with multiplicative jitter.

The delay before retry ``n`` (0-based) is::

    raw   = min(initial_delay * backoff_multiplier ** n, max_delay)
    delay = raw * (1 + jitter * r),  r uniform in [-1, 1)

Keep ``jitter`` below 1 or the delay may turn negative.
"""

from __future__ import annotations

import random
from typing import Optional

from tenacity import RetryCallState
from tenacity.wait import wait_base

from deepl_cli.domain.config.retry import RetryConfig


def compute_backoff(
    attempt: int,
    *,
    initial_delay: float,
    backoff_multiplier: float,
    max_delay: float,
    jitter: float,
    draw: Optional[float] = None,
) -> float:
    """Compute the delay in seconds before the next attempt.

    Args:
        attempt: 0-based retry index (0 is the wait before the 2nd attempt)
        initial_delay: Delay for attempt 0 before jitter
        backoff_multiplier: Growth factor per attempt (>= 1)
        max_delay: Cap applied before jitter
        jitter: Jitter fraction in [0, 1)
        draw: Random value in [-1, 1); drawn uniformly when omitted

    Returns:
        Delay in seconds
    """
    if attempt < 0:
        return initial_delay

    raw = min(initial_delay * backoff_multiplier ** attempt, max_delay)
    if draw is None:
        draw = random.uniform(-1.0, 1.0)
    return raw * (1 + jitter * draw)


class wait_jittered_exponential(wait_base):
    """Tenacity wait strategy backed by ``compute_backoff``."""

    def __init__(self, retry_config: RetryConfig) -> None:
        self.retry_config = retry_config

    def __call__(self, retry_state: RetryCallState) -> float:
        # tenacity counts attempts from 1
        return compute_backoff(
            retry_state.attempt_number - 1,
            initial_delay=self.retry_config.initial_delay,
            backoff_multiplier=self.retry_config.backoff_multiplier,
            max_delay=self.retry_config.max_delay,
            jitter=self.retry_config.jitter,
        )
