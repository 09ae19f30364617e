"""Failure classification for HTTP exchanges.

Maps a status code or a transport exception onto the transient/fatal error
taxonomy used by the retry executor.
"""

from __future__ import annotations

import logging
from enum import Enum
from http import HTTPStatus
from typing import Optional

import requests

from deepl_cli.domain.errors import (
    DeepLError,
    FatalHTTPError,
    TransientError,
    TransientHTTPError,
    TransportError,
)

logger = logging.getLogger(__name__)

STATUS_TOO_MANY_REQUESTS = 429
STATUS_QUOTA_EXCEEDED = 456
QUOTA_EXCEEDED_MESSAGE = "Quota exceeded. The character limit has been reached."


class FailureKind(str, Enum):
    TRANSIENT = "transient"
    FATAL = "fatal"


def http_error_message(status_code: int) -> str:
    """Human-readable "<code> - <reason>" message for a status code."""
    if status_code == STATUS_QUOTA_EXCEEDED:
        reason = QUOTA_EXCEEDED_MESSAGE
    else:
        try:
            reason = HTTPStatus(status_code).phrase
        except ValueError:
            reason = "Unknown Status"
    return f"{status_code} - {reason}"


def classify_status(status_code: int) -> Optional[FailureKind]:
    """Classify a status code; 2xx is not a failure and yields None."""
    if 200 <= status_code < 300:
        return None
    if status_code == STATUS_TOO_MANY_REQUESTS:
        return FailureKind.TRANSIENT
    if status_code >= 500:
        return FailureKind.TRANSIENT
    # 456 lands here: quota is a billing condition, not server overload
    return FailureKind.FATAL


def error_for_status(status_code: int) -> Optional[DeepLError]:
    """Build the error for a failed status, or None for 2xx."""
    kind = classify_status(status_code)
    if kind is None:
        return None
    message = http_error_message(status_code)
    if kind is FailureKind.TRANSIENT:
        return TransientHTTPError(status_code, message)
    return FatalHTTPError(status_code, message)


def error_for_exception(exc: requests.exceptions.RequestException) -> TransportError:
    """Wrap a transport-level failure (DNS, reset, timeout) as transient."""
    if isinstance(exc, requests.exceptions.Timeout):
        return TransportError(f"Request timed out: {exc}")
    if isinstance(exc, requests.exceptions.ConnectionError):
        return TransportError(f"Connection error: {exc}")
    return TransportError(f"HTTP transport error: {exc}")


def should_retry(exception: BaseException) -> bool:
    """Retry predicate: only transient failures are retried."""
    return isinstance(exception, TransientError)
