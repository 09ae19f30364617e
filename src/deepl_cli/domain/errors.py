"""Error taxonomy for DeepL API calls.

Every error raised by the client derives from ``DeepLError``. The retry layer
only recovers from ``TransientError``; everything else reaches the caller.
"""

from typing import Optional


class DeepLError(Exception):
    """Base class for all client errors."""

    pass


class TransientError(DeepLError):
    """Failure expected to resolve itself when retried after a delay."""

    pass


class TransientHTTPError(TransientError):
    """Rate limiting (429) or server error (5xx)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class TransportError(TransientError):
    """Network-level failure before any status was received."""

    pass


class FatalError(DeepLError):
    """Failure that will not resolve by retrying."""

    pass


class FatalHTTPError(FatalError):
    """Client error, malformed request or exceeded quota."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class DocumentProductionError(FatalError):
    """Building a streamed request body failed (file read, encoding)."""

    pass


class DocumentTranslationError(FatalError):
    """The server reported an error while translating a document."""

    def __init__(self, document_id: str, message: Optional[str] = None):
        super().__init__(f"Document {document_id} failed: {message or 'unknown error'}")
        self.document_id = document_id


class RetryCancelledError(DeepLError):
    """Cancellation fired while waiting between attempts."""

    pass


class RetryExhaustedError(DeepLError):
    """All attempts were used up on transient failures."""

    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"Request failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class RetryConfigurationError(DeepLError):
    """Retry executor was asked to run with an unusable configuration."""

    pass


class ConfigurationError(DeepLError):
    """Configuration validation error."""

    pass
