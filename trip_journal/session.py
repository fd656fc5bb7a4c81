"""
Session manager: the single owner of the current authentication token.

The manager keeps at most one ``Token`` in memory, mirrors it to a
key-value store so it survives restarts, and tells subscribers whenever
the authenticated state changes.  Every read and write happens under a
re-entrant lock, so a request thread never sees a half-replaced token
and subscribers receive notifications in mutation order.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from pydantic import ValidationError

from .errors import StorageError
from .schemas.auth import Token
from .storage import KeyValueStore, MemoryStore


logger = logging.getLogger(__name__)

DEFAULT_TOKEN_KEY = "com.tripjournal.authToken"

Subscriber = Callable[[bool], None]


class SessionManager:
    """Holds, persists and broadcasts the current ``Token``."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        *,
        key: str = DEFAULT_TOKEN_KEY,
        autoload: bool = True,
    ) -> None:
        """Initialise the manager.

        Args:
            store: Persistence collaborator.  Defaults to an in-memory
                store, i.e. nothing survives the process.
            key: Key the serialized token is stored under.
            autoload: Read a previously persisted token immediately.
        """
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self.key = key
        self._token: Optional[Token] = None
        self._subscribers: List[Subscriber] = []
        self._lock = threading.RLock()
        if autoload:
            self.load()

    # ------------------------------------------------------------------
    # Token lifecycle
    # ------------------------------------------------------------------
    def load(self) -> Optional[Token]:
        """Restore the persisted token, if any.

        A missing key or a value that does not decode as a token both
        mean "no token"; neither raises.  Subscribers are notified only
        when the authenticated state actually changes.
        """
        raw = self.store.load(self.key)
        token: Optional[Token] = None
        if raw is not None:
            try:
                token = Token.model_validate_json(raw)
            except ValidationError as exc:
                logger.warning(
                    "Discarding persisted token under %s: %s", self.key, exc.errors()[0]["msg"]
                )
        with self._lock:
            was_authenticated = self._token is not None
            self._token = token
            if was_authenticated != (token is not None):
                self._notify(token is not None)
        logger.debug("Loaded session from store: authenticated=%s", token is not None)
        return token

    def save(self, token: Token) -> None:
        """Persist ``token``, then make it current and notify subscribers.

        If the store fails nothing changes: the previous token stays
        current and ``StorageError`` is raised.
        """
        with self._lock:
            try:
                self.store.save(self.key, token.model_dump_json().encode("utf-8"))
            except OSError as exc:
                logger.error("Could not persist session token under %s: %s", self.key, exc)
                raise StorageError(f"The session could not be saved: {exc}") from exc
            self._token = token
            self._notify(True)
        logger.info("Session token saved")

    def clear(self) -> None:
        """Drop the current token from storage and memory.

        If the store fails the session stays as it was and
        ``StorageError`` is raised.
        """
        with self._lock:
            try:
                self.store.remove(self.key)
            except OSError as exc:
                logger.error("Could not remove session token under %s: %s", self.key, exc)
                raise StorageError(f"The session could not be cleared: {exc}") from exc
            self._token = None
            self._notify(False)
        logger.info("Session token cleared")

    def current(self) -> Optional[Token]:
        with self._lock:
            return self._token

    @property
    def is_authenticated(self) -> bool:
        return self.current() is not None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for authenticated-state changes.

        The callback is invoked right away with the current state and
        then after every ``save`` and ``clear``.  Returns a function
        that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)
            callback(self._token is not None)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, authenticated: bool) -> None:
        for callback in list(self._subscribers):
            callback(authenticated)
