"""Request Dispatcher: the entry point plugins use to talk to the provider.

``invoke`` validates the call synchronously, then hands a thunk to the
bounded request queue. Inside a queue slot the thunk resolves the cached
client and runs the SDK method under the retry policy. SDK calls are
blocking, so each attempt runs in the loop's default executor.

``invoke_memoized`` shares one future between every call with the same
canonical signature, including calls still in flight.
"""

import asyncio
import functools
import logging
from typing import Any, Mapping, Optional

from cloudcall.domain.errors import RequestError
from cloudcall.domain.events.api_events import RequestQueued, TransferAccelerationEnabled
from cloudcall.domain.models.common import MethodName
from cloudcall.domain.models.request import PendingCall, ServiceDescriptor
from cloudcall.infrastructure.aws.client_resolver import ClientResolver, validate_descriptor, wants_acceleration
from cloudcall.infrastructure.aws.error_mapping import normalize_error
from cloudcall.infrastructure.cache.call_cache import CallCache
from cloudcall.infrastructure.cache.canonical import canonical_descriptor, canonicalize, make_cache_key
from cloudcall.infrastructure.resilience.api_retry import RetryPolicy
from cloudcall.infrastructure.resilience.request_queue import RequestQueue

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Issues provider calls with bounded concurrency, retries and memoization."""

    def __init__(
        self,
        resolver: ClientResolver,
        retry_policy: RetryPolicy,
        request_queue: Optional[RequestQueue] = None,
        call_cache: Optional[CallCache] = None,
    ):
        self.resolver = resolver
        self.retry_policy = retry_policy
        self.request_queue = request_queue or RequestQueue()
        self.call_cache = call_cache or CallCache()

    def invoke(
        self,
        descriptor: ServiceDescriptor,
        method: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> "asyncio.Future[Any]":
        """Queues ``descriptor.method(**params)`` and returns its future.

        Raises:
            ConfigurationError: Immediately, before anything is queued, if
                the descriptor is malformed or lacks a credentials mapping.
        """
        validate_descriptor(descriptor)
        call = PendingCall(descriptor=descriptor, method=MethodName(method), params=dict(params or {}))

        if wants_acceleration(descriptor, method):
            logger.info("Using S3 Transfer Acceleration Endpoint...")
            self.retry_policy.dispatch_event(TransferAccelerationEnabled(method=method, call_id=call.call_id))

        self.retry_policy.dispatch_event(RequestQueued(
            service=descriptor.name, method=method, call_id=call.call_id,
        ))
        return self.request_queue.submit(
            lambda: self.retry_policy.execute(call, functools.partial(self._attempt, call))
        )

    def invoke_memoized(
        self,
        descriptor: ServiceDescriptor,
        method: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> "asyncio.Future[Any]":
        """Same as ``invoke`` but deduplicated by canonical call signature."""
        validate_descriptor(descriptor)
        key = make_cache_key(canonical_descriptor(descriptor), method, canonicalize(params or {}))
        return self.call_cache.get_or_create(key, lambda: self.invoke(descriptor, method, params))

    async def _attempt(self, call: PendingCall) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._call_sdk, call)

    def _call_sdk(self, call: PendingCall) -> Any:
        client = self.resolver.resolve(call.descriptor, call.method)
        operation = getattr(client, call.method, None)
        if operation is None or not callable(operation):
            raise RequestError(
                f"{call.descriptor.name} has no method '{call.method}'",
                code="UnknownOperation",
            )
        try:
            return operation(**call.params)
        except Exception as e:
            raise normalize_error(e) from e
