"""
Session Storage

Key-value store standing in for the browser's ``sessionStorage``. Attribution
data lives here for the lifetime of a visitor session.

Two backends:
    InMemorySessionStorage — one store per page/tab, lost when it goes away
    RedisSessionStorage    — shared store keyed by a session id, with TTL

Note: writes are not coordinated across concurrent pages sharing one session
(same as browser tabs of one origin). First writer wins only by timing.
"""

import logging
from typing import Protocol

import redis

from traffic_source.config import settings

logger = logging.getLogger(__name__)


class SessionStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemorySessionStorage:
    """Dict-backed session storage. Values are always strings."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)


class RedisSessionStorage:
    """
    Redis-backed session storage.

    Keys are namespaced per session: ``session:{session_id}:{key}``. Every
    write refreshes the TTL so the slots expire together with the session.
    """

    KEY_PREFIX = "session:"

    def __init__(self, client: redis.Redis, session_id: str, ttl_seconds: int | None = None):
        self._redis = client
        self.session_id = session_id
        self.ttl_seconds = ttl_seconds or settings.session_ttl_seconds

    @classmethod
    def from_url(cls, url: str, session_id: str, ttl_seconds: int | None = None) -> "RedisSessionStorage":
        client = redis.Redis.from_url(url, decode_responses=True)
        return cls(client, session_id, ttl_seconds)

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{self.session_id}:{key}"

    def get_item(self, key: str) -> str | None:
        value = self._redis.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set_item(self, key: str, value: str) -> None:
        self._redis.setex(self._key(key), self.ttl_seconds, str(value))
        logger.debug("Stored session key %s for session %s", key, self.session_id)

    def remove_item(self, key: str) -> None:
        self._redis.delete(self._key(key))
