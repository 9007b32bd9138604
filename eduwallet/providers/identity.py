"""
Identity provider for the current session.

Holds a nullable current user id and notifies subscribers when it changes.
"""

import logging
from typing import Callable, List, Optional

from eduwallet.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[str]], None]


class SessionIdentityProvider:
    def __init__(self, user_id: Optional[str] = None):
        self._current_user_id: Optional[str] = None
        self._listeners: List[IdentityListener] = []
        if user_id is not None:
            self._current_user_id = self._normalize(user_id)

    @staticmethod
    def _normalize(user_id: str) -> str:
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError("user_id must be a non-empty string")
        return user_id.strip()

    @property
    def current_user_id(self) -> Optional[str]:
        return self._current_user_id

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register listener, returns a callable that removes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, user_id: str) -> None:
        self._set(self._normalize(user_id))

    def sign_out(self) -> None:
        self._set(None)

    def _set(self, user_id: Optional[str]) -> None:
        if user_id == self._current_user_id:
            return
        previous = self._current_user_id
        self._current_user_id = user_id
        logger.info(f"Identity changed: {previous} -> {user_id}")
        for listener in list(self._listeners):
            listener(user_id)
