from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """Durable per-key string storage.

    ``set`` reports refusal (quota exceeded, backend unavailable) by returning
    False instead of raising.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if absent"""

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        """Overwrite the value under key, returns success status"""

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Delete exactly one key, returns True if it existed"""

    @abstractmethod
    def remove_all(self, key_prefix: str) -> int:
        """Delete every key starting with key_prefix, returns removed count"""

    def ping(self) -> bool:
        return True
