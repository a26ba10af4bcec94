import logging
import secrets
import threading
import time
from typing import Any, Dict, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Server-side session records keyed by an opaque id.

    Each record lives for a fixed ``ttl`` seconds from creation; updating a
    record does not extend its lifetime.
    """

    def __init__(self, ttl: int = 3600, maxsize: int = 100_000, timer=time.monotonic):
        self.ttl = ttl
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    def create(self, data: Optional[Dict[str, Any]] = None) -> str:
        sid = secrets.token_urlsafe(32)
        with self._lock:
            self._cache[sid] = dict(data or {})
        logger.debug("Session created")
        return sid

    def get(self, sid: Optional[str]) -> Optional[Dict[str, Any]]:
        if not sid:
            return None
        with self._lock:
            data = self._cache.get(sid)
        return dict(data) if data is not None else None

    def update(self, sid: str, data: Dict[str, Any]) -> bool:
        with self._lock:
            if sid not in self._cache:
                return False
            # TTLCache.__setitem__ would restart the clock, so mutate in place
            record = self._cache[sid]
            record.clear()
            record.update(data)
        return True

    def destroy(self, sid: Optional[str]) -> None:
        if not sid:
            return
        with self._lock:
            self._cache.pop(sid, None)
        logger.debug("Session destroyed")

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
