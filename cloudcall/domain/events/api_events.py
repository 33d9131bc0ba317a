"""Domain Events related to provider requests.

Examples include events for when calls are queued, retried, fail, or succeed.
"""

from dataclasses import dataclass, field
import time
from typing import Any, Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Specific Request Events ---

@dataclass
class RequestQueued(DomainEvent):
    """Event triggered when a call is handed to the request queue."""
    service: str
    method: str
    call_id: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when an SDK call is about to be made."""
    service: str
    method: str
    call_id: int
    attempt_number: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an SDK call succeeds."""
    service: str
    method: str
    call_id: int
    latency_ms: float
    attempts: int = 1
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when a call fails definitively (after retries)."""
    service: str
    method: str
    call_id: int
    error_code: Optional[Any]
    error_message: str
    attempts: int = 1
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed call."""
    service: str
    method: str
    call_id: int
    attempt_number: int
    max_retries: int
    delay_seconds: float
    error_message: str = ""
    timestamp: float = field(default_factory=time.time)

@dataclass
class TransferAccelerationEnabled(DomainEvent):
    """Event triggered when an S3 client is built against the accelerate endpoint."""
    method: str
    call_id: int
    timestamp: float = field(default_factory=time.time)
