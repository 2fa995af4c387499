from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from common.api import NotesApiClient, RequestError
from common.links import NEUTRAL_PATH, match_note_path, resolve_start_view
from common.models import AuthResult, Note, User, View
from notes.composer import Alert, NoteComposer
from notes.verifier import NoteVerifier
from session.auth import AuthService
from session.store import SessionStore


logger = structlog.get_logger(__name__)

PROFILE_LOAD_FAILED_MESSAGE = "Failed to load profile. Please login again."
DEFAULT_LOGOUT_DELAY = 2.0


class ViewController:
    """
    Top-level wiring of session state and the active view.

    Holds the discriminant (`view`), the visible `location`, and the child
    component for the active view (`composer` on the dashboard, `verifier` on
    unlock). Every transition swaps view and session together.

    Each transition bumps `_epoch`; an async result is only applied if the
    epoch it was issued under is still current.
    """

    def __init__(
        self,
        api: NotesApiClient,
        store: SessionStore,
        *,
        origin: str,
        initial_path: str = NEUTRAL_PATH,
        alert: Optional[Alert] = None,
        logout_delay: float = DEFAULT_LOGOUT_DELAY,
    ) -> None:
        self._api = api
        self._auth = AuthService(api, store)
        self._store = store
        self._origin = origin
        self._alert = alert
        self._logout_delay = logout_delay
        self._epoch = 0
        self.location = initial_path
        self.message: Optional[str] = None
        self.profile_error: Optional[str] = None
        self.pending = False
        self.composer: Optional[NoteComposer] = None
        self.verifier: Optional[NoteVerifier] = None

        # Resolved once; later navigation never re-enters the deep-link check
        start = resolve_start_view(initial_path, store.token)
        self.view = start.view
        self.note_id = start.note_id
        if self.view is View.UNLOCK and self.note_id:
            self.verifier = NoteVerifier(api, self.note_id)
        elif store.is_authenticated:
            self._enter_dashboard()

    @property
    def session(self) -> SessionStore:
        return self._store

    @property
    def user(self) -> Optional[User]:
        return self._store.user

    async def start(self) -> None:
        """Load the profile when a restored session has a token but no user."""
        if self.view is View.DASHBOARD and self._store.token and self._store.user is None:
            await self.load_profile()

    # --------------- Auth forms ---------------
    def show_login(self) -> None:
        self._transition(View.LOGIN)

    def show_register(self) -> None:
        self._transition(View.REGISTER)

    async def login(self, email: str, password: str) -> bool:
        return await self._authenticate(
            View.LOGIN, lambda: self._auth.login(email, password), "Welcome back, {name}!"
        )

    async def register(self, name: str, email: str, password: str) -> bool:
        return await self._authenticate(
            View.REGISTER, lambda: self._auth.register(name, email, password), "Welcome {name}!"
        )

    async def _authenticate(
        self, expected: View, call: Callable[[], Awaitable[AuthResult]], welcome: str
    ) -> bool:
        if self.view is not expected or self.pending:
            return False
        epoch = self._epoch
        self.pending = True
        self.message = None
        try:
            result = await call()
        except RequestError as err:
            if epoch == self._epoch:
                self.message = err.message
            return False
        finally:
            if epoch == self._epoch:
                self.pending = False

        if epoch != self._epoch:
            logger.debug("auth_result_discarded")
            return False
        self.on_success(result.token, result.user)
        self.message = welcome.format(name=result.user.name)
        return True

    def on_success(self, token: str, user: User) -> None:
        self._auth.establish(AuthResult(token=token, user=user))
        self._enter_dashboard()

    # --------------- Dashboard ---------------
    async def load_profile(self) -> Optional[User]:
        if not self._store.token or self.pending:
            return None
        epoch = self._epoch
        failure: Optional[RequestError] = None
        user: Optional[User] = None
        self.pending = True
        try:
            user = await self._auth.load_profile()
        except RequestError as err:
            failure = err
        finally:
            if epoch == self._epoch:
                self.pending = False

        if epoch != self._epoch:
            return None
        if failure is not None or user is None:
            logger.warning("profile_load_failed", status=failure.status if failure else None)
            self.profile_error = PROFILE_LOAD_FAILED_MESSAGE
            await asyncio.sleep(self._logout_delay)
            if epoch == self._epoch:
                self.on_logout()
            return None
        self._store.attach_profile(user)
        self.profile_error = None
        return user

    async def create_note(self) -> Optional[Note]:
        if self.view is not View.DASHBOARD or self.composer is None:
            return None
        token = self._store.token
        if not token:
            self.on_logout()
            return None
        composer = self.composer
        note = await composer.create_note(token)
        err = composer.last_error
        if note is None and err is not None and err.status == 401 and composer is self.composer:
            logger.info("session_expired_on_create")
            self.on_logout()
        return note

    def on_logout(self) -> None:
        self._auth.logout()
        self._transition(View.LOGIN)

    # --------------- Unlock ---------------
    async def unlock(self, password: str) -> bool:
        if self.view is not View.UNLOCK or self.verifier is None:
            return False
        await self.verifier.submit(password)
        return self.verifier.content is not None

    def on_back(self) -> None:
        self._transition(View.LOGIN)

    # --------------- Internal ---------------
    def _enter_dashboard(self) -> None:
        self._transition(View.DASHBOARD)
        self.composer = NoteComposer(self._api, origin=self._origin, alert=self._alert)

    def _transition(self, view: View) -> None:
        self._epoch += 1
        if self.verifier is not None:
            self.verifier.close()
            self.verifier = None
        if self.composer is not None:
            self.composer.discard()
            self.composer = None
        self.note_id = None
        self.pending = False
        self.message = None
        self.profile_error = None
        # A note identifier never stays in the visible location once its view is left
        if match_note_path(self.location) is not None:
            self.location = NEUTRAL_PATH
        self.view = view
        logger.debug("view_changed", view=str(view))


__all__ = ["ViewController", "PROFILE_LOAD_FAILED_MESSAGE"]
