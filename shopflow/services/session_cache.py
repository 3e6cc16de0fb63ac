from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple

log = logging.getLogger(__name__)


class InspectionSessionCache:
    """
    In-progress inspection sessions, keyed by inspection id.

    Entries expire ttl_seconds after their last put. When max_entries is
    reached the oldest entry is dropped to make room.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self.ttl_seconds = float(ttl_seconds)
        self.max_entries = int(max_entries)
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (stored_at, value); insertion order == age order
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._expired(stored_at, now):
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any) -> None:
        now = self._clock()
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            while len(self._entries) >= self.max_entries:
                old_key, _ = self._entries.popitem(last=False)
                log.debug("Session cache full, evicted %s", old_key)
            self._entries[key] = (now, value)

    def pop(self, key: str) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is None or self._expired(entry[0], now):
            return None
        return entry[1]

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [k for k, (stored_at, _) in self._entries.items() if self._expired(stored_at, now)]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def snapshot(self) -> Dict[str, Any]:
        """Live (non-expired) entries, oldest first."""
        now = self._clock()
        with self._lock:
            return {k: v for k, (stored_at, v) in self._entries.items() if not self._expired(stored_at, now)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
