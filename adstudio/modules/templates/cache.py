"""Process-local TTL cache. Entries expire on read or when a bounded cache fills up."""
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: Optional[int] = None,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() > expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: Any) -> bool:
        """Store value; when max_entries live entries are held new keys are not cached."""
        if self.max_entries is not None and key not in self._entries and len(self._entries) >= self.max_entries:
            self._prune_expired()
            if len(self._entries) >= self.max_entries:
                return False
        self._entries[key] = (value, self._clock() + self.ttl_seconds)
        return True

    def _prune_expired(self) -> None:
        now = self._clock()
        for key in [k for k, (_, expires_at) in self._entries.items() if now > expires_at]:
            del self._entries[key]

    def clear(self, key: Optional[Hashable] = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
