from __future__ import annotations

import structlog

from common.api import NotesApiClient
from common.models import AuthResult, User

from .store import SessionStore


logger = structlog.get_logger(__name__)


class AuthService:
    """
    Single entry point for login, registration and profile loading.

    Both login and register establish the session through the same path, so
    persistence behaves identically whichever form the user came through.
    """

    def __init__(self, api: NotesApiClient, store: SessionStore) -> None:
        self._api = api
        self._store = store

    @property
    def store(self) -> SessionStore:
        return self._store

    async def login(self, email: str, password: str) -> AuthResult:
        return await self._api.login(email, password)

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        return await self._api.register(name, email, password)

    def establish(self, result: AuthResult) -> User:
        self._store.set_session(result.token, result.user)
        logger.info("session_established", user_id=result.user.id)
        return result.user

    async def load_profile(self) -> User:
        token = self._store.token
        if not token:
            raise ValueError("no session token to load a profile for")
        user = await self._api.profile(token)
        return user

    def logout(self) -> None:
        self._store.clear()
        logger.info("session_cleared")
