"""Request dispatcher: authenticated HTTP calls with retry/backoff.

We keep HTTP logic centralized so every endpoint shares the same
authentication, classification and retry policy.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

import requests

from deepl_cli import __version__
from deepl_cli.domain.config.retry import RetryConfig
from deepl_cli.domain.errors import DocumentProductionError, FatalHTTPError
from deepl_cli.domain.models.endpoint import EndpointDescriptor
from deepl_cli.infrastructure.classifier import (
    error_for_exception,
    error_for_status,
    should_retry,
)
from deepl_cli.infrastructure.retry import WaitFunc, run_with_retry

logger = logging.getLogger(__name__)

SERVER_URL_PRO = "https://api.deepl.com"
SERVER_URL_FREE = "https://api-free.deepl.com"
API_VERSION = "v2"
AUTH_SCHEME = "DeepL-Auth-Key"
DEFAULT_CONTENT_TYPE = "application/x-www-form-urlencoded"
DEFAULT_TIMEOUT = 10.0


def is_free_account_auth_key(auth_key: str) -> bool:
    """Check if the key belongs to a Free account"""
    return auth_key.endswith(":fx")


def select_server_url(auth_key: str, server_url: Optional[str] = None) -> str:
    """Pick the API server for a key; an explicit URL always wins"""
    if server_url:
        return server_url.rstrip("/")
    return SERVER_URL_FREE if is_free_account_auth_key(auth_key) else SERVER_URL_PRO


def _release_body(body: Any, response: Optional[requests.Response] = None) -> None:
    """Close a streamed body and surface its production error, if any."""
    close = getattr(body, "close", None)
    if callable(close):
        close()
    raise_for_error = getattr(body, "raise_for_error", None)
    if callable(raise_for_error):
        try:
            raise_for_error()
        except DocumentProductionError:
            if response is not None:
                response.close()
            raise


class RequestDispatcher:
    """Sends endpoint descriptors to the API under the retry policy"""

    def __init__(
        self,
        auth_key: str,
        server_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: Optional[RetryConfig] = None,
    ):
        """Initialize dispatcher

        Args:
            auth_key: DeepL authentication key
            server_url: Explicit server URL (default: derived from the key)
            session: requests session to reuse (default: a new one)
            timeout: Per-attempt timeout in seconds
            retry_config: Retry policy (default: 5 attempts, 1s..120s, x1.6, 23% jitter)
        """
        if not auth_key:
            raise ValueError(
                "DeepL auth key is required. "
                "Set DEEPL_AUTH_KEY environment variable or provide in config."
            )
        self.auth_key = auth_key
        self.server_url = select_server_url(auth_key, server_url)
        self.session = session or requests.Session()
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        logger.debug(f"Request dispatcher initialized for {self.server_url}")

    def build_url(self, path: str) -> str:
        return f"{self.server_url}/{API_VERSION}/{path.lstrip('/')}"

    def build_headers(self, endpoint: EndpointDescriptor) -> Dict[str, str]:
        """Build fresh headers for one attempt

        Repeated header names are folded into one comma-separated value.
        """
        headers: Dict[str, str] = {}
        lowered: Dict[str, str] = {}
        for name, value in endpoint.headers:
            key = lowered.setdefault(name.lower(), name)
            headers[key] = f"{headers[key]}, {value}" if key in headers else value

        if "content-type" not in lowered:
            headers["Content-Type"] = DEFAULT_CONTENT_TYPE
        if "user-agent" not in lowered:
            headers["User-Agent"] = f"deepl-cli/{__version__}"
        headers["Authorization"] = f"{AUTH_SCHEME} {self.auth_key}"
        return headers

    def dispatch(
        self,
        endpoint: EndpointDescriptor,
        *,
        cancel_event: Optional[threading.Event] = None,
        wait: Optional[WaitFunc] = None,
    ) -> requests.Response:
        """Send the request, retrying transient failures

        The response body is left unread (``stream=True``); decoding it and
        closing the response is up to the caller.

        Args:
            endpoint: Request description
            cancel_event: Signal aborting the wait between attempts
            wait: Optional wait function, see ``run_with_retry``

        Returns:
            The 2xx response

        Raises:
            FatalHTTPError: On a non-retriable status
            DocumentProductionError: If a streamed body could not be produced
            RetryExhaustedError: If all attempts failed transiently
            RetryCancelledError: If cancelled while waiting to retry
        """
        url = self.build_url(endpoint.path)
        return run_with_retry(
            lambda: self._send_once(endpoint, url),
            retry_config=self.retry_config,
            should_retry=should_retry,
            cancel_event=cancel_event,
            wait=wait,
            description=f"{endpoint.method} /{API_VERSION}/{endpoint.path}",
        )

    def _send_once(self, endpoint: EndpointDescriptor, url: str) -> requests.Response:
        headers = self.build_headers(endpoint)
        body = endpoint.open_body()
        logger.debug(f"HTTP {endpoint.method} {url}")

        try:
            response = self.session.request(
                endpoint.method,
                url,
                headers=headers,
                data=body,
                timeout=self.timeout,
                stream=True,
            )
        except requests.exceptions.RequestException as e:
            _release_body(body)
            raise error_for_exception(e) from e
        except Exception:
            _release_body(body)
            raise

        _release_body(body, response)

        failure = error_for_status(response.status_code)
        if failure is not None:
            response.close()
            if isinstance(failure, FatalHTTPError):
                logger.error(f"DeepL API error for {endpoint.method} {url}: {failure}")
            raise failure
        return response
