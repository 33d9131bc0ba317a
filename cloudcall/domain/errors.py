"""Error types surfaced by the request layer."""

from dataclasses import dataclass
from typing import Optional, Union

ErrorCode = Union[str, int, None]


@dataclass
class ProviderError:
    """Normalized failure record built where the raw SDK error is caught.

    The retry policy only ever looks at these flags, never at the raw
    error shape kept in ``raw``.
    """
    message: str
    code: ErrorCode = None
    status_code: Optional[int] = None
    retryable: bool = False
    raw: Optional[BaseException] = None


class CloudCallError(Exception):
    """Base error for the request layer."""

    def __init__(self, message: str, code: ErrorCode = None):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(CloudCallError):
    """Malformed descriptor or missing credentials. Never retried."""

    def __init__(self, message: str, code: ErrorCode = 400):
        super().__init__(message, code)


class RequestError(CloudCallError):
    """A provider call that failed for good (terminal or retries exhausted)."""

    def __init__(self, message: str, code: ErrorCode = None, provider_error: Optional[ProviderError] = None):
        super().__init__(message, code)
        self.provider_error = provider_error or ProviderError(message=message, code=code)


class CredentialsError(RequestError):
    """Provider credentials could not be found or were rejected."""
