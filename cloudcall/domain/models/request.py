"""Domain models describing a single provider request."""

import enum
import itertools
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .common import DEFAULT_REGION, MethodName, Region, ServiceName

_call_ids = itertools.count(1)


class CallState(enum.Enum):
    """Lifecycle of a PendingCall."""
    ATTEMPTING = "attempting"
    RETRY_SCHEDULED = "retry_scheduled"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ServiceDescriptor:
    """Identifies a target API surface plus the parameters used to reach it.

    ``params`` carries ``credentials`` (a mapping), an optional ``region`` and
    feature or metadata flags such as ``is_s3_transfer_acceleration_enabled``
    and ``use_cache``. Two descriptors are equivalent when their canonical
    serialization matches, regardless of key insertion order.
    """
    name: ServiceName
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        name: str,
        credentials: Optional[Mapping[str, Any]] = None,
        region: Optional[str] = None,
        **flags: Any,
    ) -> "ServiceDescriptor":
        """Convenience constructor building the params bag from keywords."""
        params: dict = {"credentials": dict(credentials) if credentials is not None else {}}
        if region:
            params["region"] = region
        params.update(flags)
        return cls(name=ServiceName(name), params=params)

    @property
    def credentials(self) -> Any:
        return self.params.get("credentials") if isinstance(self.params, Mapping) else None

    @property
    def region(self) -> Region:
        region = self.params.get("region") if isinstance(self.params, Mapping) else None
        return Region(region) if region else DEFAULT_REGION


@dataclass
class PendingCall:
    """One in-flight logical invocation, destroyed once it resolves."""
    descriptor: ServiceDescriptor
    method: MethodName
    params: Mapping[str, Any] = field(default_factory=dict)
    attempt: int = 0
    state: CallState = CallState.ATTEMPTING
    call_id: int = field(default_factory=lambda: next(_call_ids))

    @property
    def label(self) -> str:
        return f"{self.descriptor.name}.{self.method}"
