"""Defines common Value Objects used across the request layer.

These objects represent simple values like service names, method names
and cache keys, ensuring consistency and type safety.
"""

from typing import NewType, Optional, TypedDict

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
ServiceName = NewType("ServiceName", str)      # Registry identifier, e.g. 'S3' or 'DynamoDB.Resource'
MethodName = NewType("MethodName", str)        # SDK method, e.g. 'describe_stacks'
Region = NewType("Region", str)                # e.g. 'us-east-1'

# === Caching Context ===
CacheKey = NewType("CacheKey", str)            # Hashed canonical call signature
CanonicalForm = NewType("CanonicalForm", str)  # Deterministic serialization before hashing

DEFAULT_REGION = Region("us-east-1")

# --- Structured Data ---
class Credentials(TypedDict, total=False):
    """Credential mapping accepted by the boto3 Session constructor."""
    aws_access_key_id: str
    aws_secret_access_key: str
    aws_session_token: str
    profile_name: str

class BackoffPolicy(TypedDict):
    """Value Object representing retry backoff configuration."""
    max_retries: int
    base_backoff_ms: int
    jitter_low_ms: int
    jitter_high_ms: int

class ClientConstructionParams(TypedDict, total=False):
    """Exactly what gets forwarded to a service factory."""
    credentials: Credentials
    region: Region
    use_accelerate_endpoint: Optional[bool]
