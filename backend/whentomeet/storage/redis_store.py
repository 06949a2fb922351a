"""
Redis blob store: each logical key is one Redis string holding JSON, namespaced as
<REDIS_KEY_PREFIX>:<key> (e.g. when-to-meet:users, when-to-meet:calendar).
"""
import json
import logging
import threading
from typing import Any

import redis

from whentomeet.core.errors import ConfigurationError, TransientIOError

logger = logging.getLogger(__name__)

SOCKET_TIMEOUT_SECONDS = 5
MAX_CONNECTIONS = 20


class RedisBlobStore:
    def __init__(
        self,
        url: str = "",
        *,
        key_prefix: str = "when-to-meet",
        client: Any | None = None,
    ) -> None:
        if client is None and not url:
            raise ConfigurationError("REDIS_URL environment variable is not set. Please configure your Redis database.")
        self._url = url
        self._prefix = key_prefix
        self._client = client
        self._client_lock = threading.Lock()

    @property
    def backend_id(self) -> str:
        return "redis"

    def _redis(self):
        # One pooled client reused across requests; created on first use
        with self._client_lock:
            if self._client is None:
                self._client = redis.Redis.from_url(
                    self._url,
                    decode_responses=True,
                    socket_timeout=SOCKET_TIMEOUT_SECONDS,
                    socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
                    max_connections=MAX_CONNECTIONS,
                )
            return self._client

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}" if self._prefix else key

    def get(self, key: str) -> Any | None:
        try:
            raw = self._redis().get(self._key(key))
        except redis.RedisError as e:
            logger.exception("Error fetching %s from Redis", self._key(key))
            raise TransientIOError(f"Failed to fetch {key}") from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Corrupt JSON under Redis key %s: %s", self._key(key), e)
            raise TransientIOError(f"Corrupt data under {key}") from e

    def set(self, key: str, value: Any) -> None:
        try:
            self._redis().set(self._key(key), json.dumps(value))
        except redis.RedisError as e:
            logger.exception("Error saving %s to Redis", self._key(key))
            raise TransientIOError(f"Failed to save {key}") from e
