"""In-memory TTL store for per-staff search state."""

from typing import Optional, Dict, Any
import time
import threading


class SessionStore:
    """In-memory session dictionary with TTL semantics."""

    def __init__(self, ttl_seconds: int = 43200):
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._data: Dict[str, Dict[str, Any]] = {}

    def _expired(self, rec: Dict[str, Any]) -> bool:
        return (time.time() - rec.get("updated_at", 0)) > self.ttl_seconds

    def get(self, staff_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored state, or None if absent or expired."""
        with self._lock:
            rec = self._data.get(staff_id)
            if not rec:
                return None
            if self._expired(rec):
                self._data.pop(staff_id, None)
                return None
            return rec.get("state")

    def set(self, staff_id: str, state: Dict[str, Any]) -> None:
        now = time.time()
        with self._lock:
            self._data[staff_id] = {
                "state": state,
                "updated_at": now,
                "started_at": self._data.get(staff_id, {}).get("started_at", now),
            }

    def clear(self, staff_id: str) -> None:
        with self._lock:
            self._data.pop(staff_id, None)

    def touch(self, staff_id: str) -> None:
        """Update last-seen timestamp to avoid expiration."""
        with self._lock:
            if staff_id in self._data:
                self._data[staff_id]["updated_at"] = time.time()

    def ping(self) -> bool:
        return True
