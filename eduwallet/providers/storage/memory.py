"""
In-process key-value storage.

- Keeps values in a plain dict, lost on restart
- Optional byte quota emulating browser storage limits
"""

import logging
from typing import Dict, Optional

from eduwallet.providers.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. ``keys()`` is an inspection helper for tests, not part of the port."""

    def __init__(self, max_bytes: Optional[int] = None):
        self._data: Dict[str, str] = {}
        self._max_bytes = max_bytes

    @staticmethod
    def _entry_size(key: str, value: str) -> int:
        return len(key.encode("utf-8")) + len(value.encode("utf-8"))

    def _used_bytes(self) -> int:
        return sum(self._entry_size(k, v) for k, v in self._data.items())

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        if self._max_bytes is not None:
            current = self._data.get(key)
            freed = self._entry_size(key, current) if current is not None else 0
            projected = self._used_bytes() - freed + self._entry_size(key, value)
            if projected > self._max_bytes:
                logger.warning(
                    f"Storage quota exceeded for {key}: {projected} > {self._max_bytes} bytes"
                )
                return False
        self._data[key] = value
        return True

    def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def remove_all(self, key_prefix: str) -> int:
        keys = [key for key in self._data if key.startswith(key_prefix)]
        for key in keys:
            del self._data[key]
        return len(keys)

    def keys(self):
        return list(self._data.keys())
