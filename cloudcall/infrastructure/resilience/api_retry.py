"""Retry policy for provider calls.

Re-issues calls that failed with throttling (429) or transient errors after
a jittered constant backoff (roughly 4 to 7 seconds), up to a bounded number
of retries. Credential failures and other terminal errors are raised on the
first attempt.
"""

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Optional

from cloudcall.domain.errors import CredentialsError, RequestError
from cloudcall.domain.events.api_events import (
    ApiCallFailed,
    ApiCallInitiated,
    ApiCallSucceeded,
    DomainEvent,
    RetryScheduled,
)
from cloudcall.domain.models.common import BackoffPolicy
from cloudcall.domain.models.request import CallState, PendingCall

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 4
BASE_BACKOFF_MS = 5000
JITTER_LOW_MS = -1000
JITTER_HIGH_MS = 2000

EventListener = Callable[[DomainEvent], None]


class RetryPolicy:
    """Runs a PendingCall until it succeeds or can no longer be retried."""

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_backoff_ms: int = BASE_BACKOFF_MS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
        event_listener: Optional[EventListener] = None,
    ):
        """Initializes the RetryPolicy.

        Args:
            max_retries: Maximum number of retries after the first attempt.
            base_backoff_ms: Constant part of the delay before each retry.
            sleep: Coroutine used to wait out the backoff.
            rand: Source of uniform floats in [0, 1) for the jitter.
            event_listener: Optional callback receiving lifecycle events.
        """
        self.max_retries = max_retries
        self.base_backoff_ms = base_backoff_ms
        self._sleep = sleep
        self._rand = rand
        self._event_listener = event_listener

    @property
    def backoff_policy(self) -> BackoffPolicy:
        return BackoffPolicy(
            max_retries=self.max_retries,
            base_backoff_ms=self.base_backoff_ms,
            jitter_low_ms=JITTER_LOW_MS,
            jitter_high_ms=JITTER_HIGH_MS,
        )

    def dispatch_event(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self._event_listener is not None:
            self._event_listener(event)

    def should_retry(self, error: RequestError, attempt: int) -> bool:
        """Decides whether a failed attempt gets another try.

        Throttling (429) is retried even when the provider marked it
        non-retryable; 403s and credential errors never are.
        """
        if attempt >= self.max_retries or isinstance(error, CredentialsError):
            return False
        provider_error = error.provider_error
        if provider_error.status_code == 429:
            return True
        return (
            provider_error.retryable
            and provider_error.status_code != 403
            and provider_error.code != "CredentialsError"
        )

    def compute_backoff(self) -> float:
        """Returns a fresh delay in seconds, within [4, 7) with the defaults."""
        jitter_ms = self._rand() * (JITTER_HIGH_MS - JITTER_LOW_MS) + JITTER_LOW_MS
        return (self.base_backoff_ms + jitter_ms) / 1000

    async def execute(self, call: PendingCall, attempt_fn: Callable[[], Awaitable[Any]]) -> Any:
        """Executes ``attempt_fn`` for ``call`` with retries.

        ``attempt_fn`` must raise ``RequestError`` (already normalized) on
        failure.

        Raises:
            RequestError: On a terminal error or once retries are exhausted.
        """
        while True:
            call.state = CallState.ATTEMPTING
            self.dispatch_event(ApiCallInitiated(
                service=call.descriptor.name, method=call.method,
                call_id=call.call_id, attempt_number=call.attempt + 1,
            ))
            start_time = time.perf_counter()
            try:
                result = await attempt_fn()
            except RequestError as e:
                if not self.should_retry(e, call.attempt):
                    call.state = CallState.FAILED
                    logger.debug(
                        f"{call.label} failed after {call.attempt + 1} attempt(s): "
                        f"{type(e).__name__}: {e.message}"
                    )
                    self.dispatch_event(ApiCallFailed(
                        service=call.descriptor.name, method=call.method, call_id=call.call_id,
                        error_code=e.code, error_message=e.message, attempts=call.attempt + 1,
                    ))
                    raise

                call.attempt += 1
                call.state = CallState.RETRY_SCHEDULED
                backoff = self.compute_backoff()
                logger.warning(
                    f"Recoverable error occurred ({e.message}), sleeping for ~{round(backoff)} seconds. "
                    f"Try {call.attempt} of {self.max_retries}"
                )
                self.dispatch_event(RetryScheduled(
                    service=call.descriptor.name, method=call.method, call_id=call.call_id,
                    attempt_number=call.attempt, max_retries=self.max_retries,
                    delay_seconds=backoff, error_message=e.message,
                ))
                await self._sleep(backoff)
                continue

            call.state = CallState.SUCCESS
            latency_ms = (time.perf_counter() - start_time) * 1000
            self.dispatch_event(ApiCallSucceeded(
                service=call.descriptor.name, method=call.method, call_id=call.call_id,
                latency_ms=latency_ms, attempts=call.attempt + 1,
            ))
            return result
