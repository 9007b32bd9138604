"""
Redis-backed key-value storage with graceful error handling.
- Reads never raise (returns None on failure)
- Writes report failure through the return value
- Lazy connection with health checks
"""

from typing import Optional
import logging

import redis

from eduwallet.config import Settings
from eduwallet.providers.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class RedisKeyValueStore(KeyValueStore):
    def __init__(self, settings: Settings, client: Optional[redis.Redis] = None):
        self._settings = settings
        self._client: Optional[redis.Redis] = client

    def _get_client(self) -> Optional[redis.Redis]:
        """Lazy connection with health check"""
        if self._client is None:
            try:
                client = redis.Redis.from_url(
                    self._settings.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_keepalive=True,
                    health_check_interval=30,
                )
                client.ping()
                self._client = client
            except redis.RedisError as e:
                logger.warning(f"Redis connection failed: {e}")
                self._client = None
        return self._client

    def get(self, key: str) -> Optional[str]:
        try:
            client = self._get_client()
            if client is None:
                return None
            value = client.get(key)
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            return value
        except redis.RedisError as e:
            logger.warning(f"Redis GET failed for {key}: {e}")
            return None

    def set(self, key: str, value: str) -> bool:
        try:
            client = self._get_client()
            if client is None:
                return False
            client.set(key, value)
            return True
        except redis.RedisError as e:
            logger.error(f"Redis SET failed for {key}: {e}")
            return False

    def remove(self, key: str) -> bool:
        try:
            client = self._get_client()
            if client is None:
                return False
            return bool(client.delete(key))
        except redis.RedisError as e:
            logger.error(f"Redis DEL failed for {key}: {e}")
            return False

    def remove_all(self, key_prefix: str) -> int:
        client = self._get_client()
        if client is None:
            logger.warning(f"Redis unavailable, skipped purge of {key_prefix}*")
            return 0
        removed = 0
        try:
            for key in client.scan_iter(match=f"{key_prefix}*"):
                removed += client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Redis purge failed for {key_prefix}*: {e}")
        return removed

    def ping(self) -> bool:
        try:
            client = self._get_client()
            return client is not None and bool(client.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis PING failed: {e}")
            return False

    def close(self):
        """Close connection pool on app shutdown"""
        if self._client:
            self._client.close()
            self._client = None
