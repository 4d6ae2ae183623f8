# foodieai/cache.py
# ---------------------------------------------------------
# Short-lived key/value state with explicit expiry.
#
# Used for the manual product de-dup window (products.py).
# Call sites depend on the TTLStore protocol only, so the
# in-process store can be swapped for a shared one (Redis, ...)
# without touching them.
#
# Best effort: entries vanish on restart and are not shared
# between processes.
# ---------------------------------------------------------

import threading
import time
from typing import Any, Callable, Optional, Protocol


class TTLStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl_seconds: float) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryTTLStore:
    """Dict-backed TTLStore. Expired entries are dropped lazily on access."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        # FastAPI runs sync routes in a thread pool
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._purge_expired()
            self._entries[key] = (self._clock() + ttl_seconds, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
