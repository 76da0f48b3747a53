"""Cache interfaces."""

from typing import Optional, Any, Dict, Tuple
import threading
import time


class CacheStore:
    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        raise NotImplementedError


class MemoryCache(CacheStore):
    """TTL cache used for search responses within a session."""

    def __init__(self) -> None:
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at is not None and time.time() >= expires_at:
                self._data.pop(key, None)
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        expires_at = time.time() + ttl_seconds
        with self._lock:
            self._data[key] = (value, expires_at)


class PredictionCache:
    """Match id -> PredictionResult for one page session.

    At most one result per id: ``put_if_absent`` checks and populates under
    the same lock.
    """

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def __contains__(self, match_id: str) -> bool:
        with self._lock:
            return match_id in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def get(self, match_id: str) -> Optional[Any]:
        with self._lock:
            return self._data.get(match_id)

    def put_if_absent(self, match_id: str, result: Any) -> bool:
        """Store ``result`` unless the id already has one. Returns True when stored."""
        with self._lock:
            if match_id in self._data:
                return False
            self._data[match_id] = result
            return True
