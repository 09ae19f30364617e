"""Retry executor built on tenacity.

Runs an operation until it succeeds, fails with a non-retriable error, runs
out of attempts or is cancelled while waiting between attempts.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
)

from deepl_cli.domain.config.retry import RetryConfig
from deepl_cli.domain.errors import (
    RetryCancelledError,
    RetryConfigurationError,
    RetryExhaustedError,
)
from deepl_cli.infrastructure.backoff import wait_jittered_exponential

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Waits for ``delay`` seconds, returns True if cancelled meanwhile.
WaitFunc = Callable[[float], bool]


def run_with_retry(
    operation: Callable[[], T],
    *,
    retry_config: RetryConfig,
    should_retry: Callable[[BaseException], bool],
    cancel_event: Optional[threading.Event] = None,
    wait: Optional[WaitFunc] = None,
    description: str = "operation",
) -> T:
    """Run ``operation`` with retries.

    Args:
        operation: Callable returning a value or raising
        retry_config: Attempt budget and backoff parameters
        should_retry: Predicate deciding whether an exception is retriable
        cancel_event: Signal aborting the wait between attempts
        wait: Optional wait function (defaults to ``cancel_event.wait``)
        description: Label used in log messages

    Returns:
        The operation's result

    Raises:
        RetryConfigurationError: If ``max_attempts`` is 0
        RetryCancelledError: If cancellation fired during a wait
        RetryExhaustedError: If every attempt failed with a retriable error
        Exception: The first non-retriable error, unchanged
    """
    max_attempts = retry_config.max_attempts
    if max_attempts < 1:
        raise RetryConfigurationError(
            f"max_attempts must be at least 1 to run {description}, got {max_attempts}"
        )

    if cancel_event is None:
        cancel_event = threading.Event()
    wait_fn = wait or cancel_event.wait

    def _sleep(delay: float) -> None:
        cancelled = wait_fn(max(delay, 0.0))
        if cancelled or cancel_event.is_set():
            logger.info(f"{description} cancelled while waiting to retry")
            raise RetryCancelledError(f"{description} cancelled while waiting to retry")

    def _before_sleep(retry_state: RetryCallState) -> None:
        if retry_state.outcome is None:
            return
        exception = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"{description} failed (attempt {retry_state.attempt_number}/{max_attempts}): "
            f"{exception}. Retrying in {delay:.2f}s..."
        )

    def _exhausted(retry_state: RetryCallState) -> T:
        last_error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.error(f"{description} failed after {retry_state.attempt_number} attempts: {last_error}")
        raise RetryExhaustedError(retry_state.attempt_number, last_error) from last_error

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_jittered_exponential(retry_config),
        retry=retry_if_exception(should_retry),
        sleep=_sleep,
        before_sleep=_before_sleep,
        retry_error_callback=_exhausted,
        reraise=True,
    )
    return retrying(operation)
