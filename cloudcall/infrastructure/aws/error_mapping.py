"""Normalizes raw SDK failures into ProviderError records.

Everything the retry policy needs (retryable flag, status, code) is decided
here, at the point the raw error is caught. Credential failures are turned
into terminal ``CredentialsError`` instances with a readable message.
"""

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    CredentialRetrievalError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)

from cloudcall.domain.errors import CredentialsError, ProviderError, RequestError

logger = logging.getLogger(__name__)

CREDENTIALS_ERROR_PREFIXES = ("Missing credentials in config", "Unable to locate credentials")
METADATA_ERROR_PREFIX = "EC2 Metadata"
CREDENTIALS_DOCS_URL = "https://docs.aws.amazon.com/sdkref/latest/guide/access.html"
CREDENTIALS_NOT_FOUND_MESSAGE = (
    "AWS provider credentials not found."
    " Learn how to set up AWS provider credentials"
    f" in our docs here: <{CREDENTIALS_DOCS_URL}>."
)

# Same lists botocore's "standard" retry mode uses
THROTTLING_CODES = frozenset({
    "Throttling",
    "ThrottlingException",
    "ThrottledException",
    "RequestThrottledException",
    "TooManyRequestsException",
    "ProvisionedThroughputExceededException",
    "TransactionInProgressException",
    "RequestLimitExceeded",
    "BandwidthLimitExceeded",
    "LimitExceededException",
    "RequestThrottled",
    "SlowDown",
    "PriorRequestNotComplete",
    "EC2ThrottledException",
})
TRANSIENT_CODES = frozenset({
    "RequestTimeout",
    "RequestTimeoutException",
    "InternalError",
    "InternalFailure",
    "ServiceUnavailable",
    "ServiceUnavailableException",
})
TRANSIENT_EXCEPTIONS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ReadTimeoutError,
    ConnectTimeoutError,
)
CREDENTIAL_EXCEPTIONS = (NoCredentialsError, PartialCredentialsError, CredentialRetrievalError)


def _raw_message(err: Any) -> Optional[str]:
    if isinstance(err, Mapping):
        message = err.get("message")
        return None if message is None else str(message)
    message = getattr(err, "message", None)
    if message is not None:
        return str(message)
    if isinstance(err, BaseException) and err.args and err.args[0] is not None:
        return str(err)
    return None


def _next_cause(err: Any) -> Any:
    if isinstance(err, Mapping):
        return err.get("original_error")
    return getattr(err, "original_error", None) or getattr(err, "__cause__", None)


def _client_error_to_provider_error(exc: ClientError) -> ProviderError:
    error = exc.response.get("Error", {})
    code = error.get("Code")
    status_code = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    retryable = (
        code in THROTTLING_CODES
        or code in TRANSIENT_CODES
        or status_code == 429
        or (status_code is not None and status_code >= 500)
    )
    message = error.get("Message") or (str(code) if code is not None else str(exc))
    return ProviderError(message=message, code=code, status_code=status_code, retryable=retryable, raw=exc)


def to_provider_error(exc: BaseException) -> ProviderError:
    """Reads code, status and retryability off a raw SDK error."""
    if isinstance(exc, ClientError):
        return _client_error_to_provider_error(exc)

    if isinstance(exc, BotoCoreError):
        code = type(exc).__name__
        return ProviderError(
            message=str(exc) or code,
            code=code,
            retryable=isinstance(exc, TRANSIENT_EXCEPTIONS),
            raw=exc,
        )

    # Duck-typed errors: other SDK adapters and test doubles
    code = getattr(exc, "code", None)
    status_code = getattr(exc, "status_code", None)
    message = _raw_message(exc)
    if not message:
        message = str(code) if code is not None else type(exc).__name__
    return ProviderError(
        message=message,
        code=code,
        status_code=status_code,
        retryable=bool(getattr(exc, "retryable", False)),
        raw=exc,
    )


def is_credentials_error(exc: BaseException, message: str) -> bool:
    return isinstance(exc, CREDENTIAL_EXCEPTIONS) or message.startswith(CREDENTIALS_ERROR_PREFIXES)


def credentials_error_message(exc: BaseException) -> str:
    """Builds the user-facing message for a credential failure.

    Walks the ``original_error``/``__cause__`` chain until it finds an
    instance-metadata failure or runs out of links. Running out at the
    metadata lookup means every credential source failed, so the user gets
    a pointer to setup docs; otherwise the SDK's own message is kept since
    the configured credentials were most likely just wrong.
    """
    bottom: Any = exc
    seen = {id(exc)}
    while not (_raw_message(bottom) or "").startswith(METADATA_ERROR_PREFIX):
        cause = _next_cause(bottom)
        if cause is None or id(cause) in seen:
            break
        seen.add(id(cause))
        bottom = cause

    bottom_message = _raw_message(bottom) or ""
    # botocore raises a bare NoCredentialsError once the metadata provider, the last in its chain, fails
    if bottom_message.startswith(METADATA_ERROR_PREFIX) or (
        bottom is exc and type(exc) is NoCredentialsError
    ):
        return CREDENTIALS_NOT_FOUND_MESSAGE
    return bottom_message or str(getattr(exc, "code", "")) or type(exc).__name__


def normalize_error(exc: BaseException) -> RequestError:
    """Maps a raw SDK error to the error surfaced to callers."""
    provider_error = to_provider_error(exc)

    if is_credentials_error(exc, provider_error.message):
        message = credentials_error_message(exc)
        logger.debug(f"Credentials error detected: {provider_error.message!r} -> {message!r}")
        return CredentialsError(
            message,
            provider_error.code,
            replace(provider_error, retryable=False),
        )

    return RequestError(provider_error.message, provider_error.code, provider_error)
