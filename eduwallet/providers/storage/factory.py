import logging

from eduwallet.config import Settings
from eduwallet.providers.storage.base import KeyValueStore
from eduwallet.providers.storage.memory import InMemoryKeyValueStore
from eduwallet.providers.storage.redis_store import RedisKeyValueStore

logger = logging.getLogger(__name__)


def build_key_value_store(settings: Settings) -> KeyValueStore:
    """Select the storage adapter named by STORAGE_BACKEND"""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "redis":
        logger.info(
            f"Using redis storage at {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
        )
        return RedisKeyValueStore(settings=settings)
    if backend == "memory":
        logger.info("Using in-memory storage")
        return InMemoryKeyValueStore(max_bytes=settings.STORAGE_MAX_BYTES)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
