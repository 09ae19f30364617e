"""Shared fixtures: fake HTTP session and response builder"""

from __future__ import annotations

import io
import json
from typing import Any, Callable, Dict, List, Optional, Union

import pytest
import requests


def make_response(
    status_code: int,
    payload: Any = None,
    *,
    content: Optional[bytes] = None,
    content_type: str = "application/json",
) -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.url = "https://api.deepl.test/v2/"
    if content is None:
        content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    r.raw = io.BytesIO(content)
    r.headers["Content-Type"] = content_type
    return r


class FakeSession:
    """Stands in for requests.Session

    ``outcomes`` holds responses to return or exceptions to raise, one per
    request. Iterable bodies are consumed like a real transport would.
    """

    def __init__(self, outcomes: List[Union[requests.Response, BaseException, Callable[..., Any]]]):
        self.outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        data = kwargs.get("data")
        sent = data
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.outcomes.pop(0)
        if callable(outcome) and not isinstance(outcome, requests.Response):
            return outcome(method, url, **kwargs)
        if data is not None and not isinstance(data, (bytes, str)):
            sent = b"".join(data)
        self.calls[-1]["sent"] = sent
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingWait:
    """Wait function recording delays instead of sleeping"""

    def __init__(self, cancel_after: Optional[int] = None):
        self.delays: List[float] = []
        self.cancel_after = cancel_after

    def __call__(self, delay: float) -> bool:
        self.delays.append(delay)
        return self.cancel_after is not None and len(self.delays) >= self.cancel_after


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def session_factory():
    return FakeSession


@pytest.fixture
def recording_wait():
    return RecordingWait()


@pytest.fixture
def wait_factory():
    return RecordingWait
