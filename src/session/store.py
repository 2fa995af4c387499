from __future__ import annotations

from typing import Optional, Protocol

import structlog

from common.models import User

from .models import Session


logger = structlog.get_logger(__name__)


class SessionStorage(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, token: str) -> None: ...

    def delete(self) -> None: ...


class SessionStore:
    """
    Holds the current `Session`. Makes no network calls.

    Token and user are written together by `set_session` and dropped together
    by `clear`. With a storage backend the token survives restarts; a restored
    session has a token but no user until `attach_profile` is called.
    """

    def __init__(self, storage: Optional[SessionStorage] = None) -> None:
        self._storage = storage
        self._session = Session.empty()
        if storage is not None:
            self._restore(storage)

    def _restore(self, storage: SessionStorage) -> None:
        try:
            token = storage.load()
        except ValueError as ex:
            logger.warning("session_restore_failed", error=str(ex))
            storage.delete()
            return
        if token:
            self._session = Session(token=token)
            logger.debug("session_restored")

    @property
    def session(self) -> Session:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token

    @property
    def user(self) -> Optional[User]:
        return self._session.user

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    def set_session(self, token: str, user: User) -> None:
        if not token:
            raise ValueError("token is required")
        self._session = Session(token=token, user=user)
        if self._storage is not None:
            self._storage.save(token)

    def attach_profile(self, user: User) -> None:
        """Complete a restored session with its fetched profile."""
        if not self._session.token:
            raise ValueError("cannot attach a profile without a session token")
        self._session = Session(token=self._session.token, user=user)

    def clear(self) -> None:
        self._session = Session.empty()
        if self._storage is not None:
            self._storage.delete()
