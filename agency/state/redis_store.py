import json
import redis
from typing import Dict, Optional, Any

from agency.config import settings
from agency.obs.logger import log_event
from agency.state.store import SessionStore


class RedisSessionStore:
    """Per-staff state in Redis, falling back to process memory when Redis is down."""

    def __init__(self, redis_url: str = None, ttl_seconds: int = None):
        self.redis_url = redis_url or settings.REDIS_URL
        self.ttl_seconds = ttl_seconds or settings.REDIS_TTL_SECONDS
        self.client = redis.from_url(self.redis_url, decode_responses=True)
        self.prefix = "staff_state:"
        self._fallback = SessionStore(self.ttl_seconds)

        try:
            self.client.ping()
        except redis.RedisError as e:
            self.client = None
            log_event("redis_unavailable", level="WARNING", error=str(e))

    def _get_key(self, staff_id: str) -> str:
        return f"{self.prefix}{staff_id}"

    def get(self, staff_id: str) -> Optional[Dict[str, Any]]:
        if self.client is None:
            return self._fallback.get(staff_id)
        try:
            data = self.client.get(self._get_key(staff_id))
        except redis.RedisError as e:
            log_event("redis_get_failed", level="ERROR", error=str(e))
            return self._fallback.get(staff_id)
        return json.loads(data) if data else None

    def set(self, staff_id: str, state: Dict[str, Any]) -> None:
        if self.client is None:
            self._fallback.set(staff_id, state)
            return
        try:
            self.client.setex(self._get_key(staff_id), self.ttl_seconds,
                              json.dumps(state, ensure_ascii=False))
        except redis.RedisError as e:
            log_event("redis_set_failed", level="ERROR", error=str(e))
            self._fallback.set(staff_id, state)

    def touch(self, staff_id: str) -> None:
        if self.client is None:
            self._fallback.touch(staff_id)
            return
        self.client.expire(self._get_key(staff_id), self.ttl_seconds)

    def clear(self, staff_id: str) -> None:
        if self.client is None:
            self._fallback.clear(staff_id)
            return
        self.client.delete(self._get_key(staff_id))

    def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False
