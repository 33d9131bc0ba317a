"""Canonical call signatures.

Turns descriptors, method names and parameter bags into a deterministic
string (mapping keys sorted at every depth, sequence order preserved) and
hashes the joined parts into a ``CacheKey``. Pure functions, no state.
"""

import hashlib
import json
from typing import Any, Mapping

from cloudcall.domain.models.common import CacheKey, CanonicalForm
from cloudcall.domain.models.request import ServiceDescriptor

KEY_SEPARATOR = "|"


def _normalize(value: Any) -> Any:
    """Converts ``value`` into JSON-ready data with a stable shape."""
    if isinstance(value, ServiceDescriptor):
        return {"name": str(value.name), "params": _normalize(value.params)}
    if isinstance(value, Mapping):
        # Keys are stringified so mixed int/str keys still sort
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_normalize(v) for v in value), key=lambda v: json.dumps(v, sort_keys=True))
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        return {"__bytes__": value.hex()}
    return {"__type__": type(value).__name__, "repr": repr(value)}


def canonicalize(value: Any) -> CanonicalForm:
    """Returns the order-independent serialization of ``value``.

    Mapping keys are compared as strings, so ``{1: "a"}`` and ``{"1": "a"}``
    canonicalize identically. SDK params are keyword arguments, whose keys
    are always strings.

    >>> canonicalize({"b": 1, "a": {"d": 2, "c": [3, 1]}})
    '{"a":{"c":[3,1],"d":2},"b":1}'
    """
    return CanonicalForm(json.dumps(_normalize(value), sort_keys=True, separators=(",", ":")))


def canonical_descriptor(descriptor: ServiceDescriptor) -> CanonicalForm:
    return canonicalize(descriptor)


def make_cache_key(*parts: str) -> CacheKey:
    """Hashes already-canonical parts, joined in positional order."""
    joined = KEY_SEPARATOR.join(parts)
    return CacheKey(hashlib.sha256(joined.encode("utf-8")).hexdigest())
