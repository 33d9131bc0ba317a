"""Memoization of whole provider calls.

The cache stores the future of a call, not its value, so callers that
arrive while the first call is still in flight share its outcome instead
of issuing duplicate requests. Entries live as long as the cache; there
is no TTL and no eviction.
"""

import logging
import threading
from typing import Awaitable, Callable, Dict, Optional

from cloudcall.domain.models.common import CacheKey

logger = logging.getLogger(__name__)


class CallCache:
    """Process-lifetime map of call signature -> shared future."""

    def __init__(self):
        self._entries: Dict[CacheKey, Awaitable] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def get(self, key: CacheKey) -> Optional[Awaitable]:
        return self._entries.get(key)

    def get_or_create(self, key: CacheKey, factory: Callable[[], Awaitable]) -> Awaitable:
        """Returns the cached future for ``key``, creating it on a miss.

        The lookup and the store happen as one step: ``factory`` must not
        await. If it raises, nothing is cached. A cancelled entry (e.g. left
        pending when its event loop shut down) is replaced, not reused.
        """
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None and _is_cancelled(existing):
                logger.debug(f"Dropping cancelled call for key: {key[:12]}")
                existing = None
            if existing is not None:
                self.hits += 1
                logger.debug(f"Call cache hit for key: {key[:12]}")
                return existing
            future = factory()
            self._entries[key] = future
            self.misses += 1
            logger.debug(f"Call cache miss for key: {key[:12]}; stored pending call")
            return future


def _is_cancelled(entry: Awaitable) -> bool:
    cancelled = getattr(entry, "cancelled", None)
    return bool(cancelled and cancelled())
