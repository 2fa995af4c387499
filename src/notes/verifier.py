from __future__ import annotations

from enum import StrEnum
from typing import Optional

import structlog

from common.api import NotesApiClient, RequestError
from common.models import NoteContent


logger = structlog.get_logger(__name__)

EMPTY_PASSWORD_MESSAGE = "Password is required"


class VerifierState(StrEnum):
    LOCKED = "locked"
    VERIFYING = "verifying"
    UNLOCKED = "unlocked"
    CLOSED = "closed"


class NoteVerifier:
    """
    Verify-then-reveal state machine for one shared note.

    Transitions
    - LOCKED --submit(password)--> VERIFYING (empty passwords never leave LOCKED)
    - VERIFYING --success--> UNLOCKED, content stored, error cleared
    - VERIFYING --failure--> LOCKED, server message stored verbatim
    - any --close()--> CLOSED, note id and content dropped

    A submit outside LOCKED has no effect, so at most one verification request
    is ever in flight. Content is never cached: a new verifier always starts
    LOCKED.
    """

    def __init__(self, api: NotesApiClient, note_id: str) -> None:
        if not note_id:
            raise ValueError("note_id is required")
        self._api = api
        self._note_id: Optional[str] = note_id
        self._state = VerifierState.LOCKED
        self._generation = 0
        self.content: Optional[NoteContent] = None
        self.error: Optional[str] = None

    @property
    def state(self) -> VerifierState:
        return self._state

    @property
    def note_id(self) -> Optional[str]:
        return self._note_id

    @property
    def can_submit(self) -> bool:
        return self._state is VerifierState.LOCKED

    async def submit(self, password: str) -> VerifierState:
        note_id = self._note_id
        if not self.can_submit or note_id is None:
            logger.debug("verify_ignored", state=str(self._state))
            return self._state
        if not password:
            self.error = EMPTY_PASSWORD_MESSAGE
            return self._state

        generation = self._generation
        self._state = VerifierState.VERIFYING
        self.error = None
        try:
            content = await self._api.verify_note(note_id, password)
        except RequestError as err:
            if generation != self._generation:
                return self._state
            self._state = VerifierState.LOCKED
            self.content = None
            # Forwarded as-is; the client must not tell "wrong password" from "no such note"
            self.error = err.message
            logger.info("note_verify_failed", note_id=note_id, status=err.status)
            return self._state
        else:
            if generation != self._generation:
                logger.debug("verify_result_discarded", note_id=note_id)
                return self._state
            self._state = VerifierState.UNLOCKED
            self.content = content
            self.error = None
            logger.info("note_unlocked", note_id=note_id)
            return self._state
        finally:
            # Never strand the form in VERIFYING, whatever the call raised
            if generation == self._generation and self._state is VerifierState.VERIFYING:
                self._state = VerifierState.LOCKED

    def close(self) -> None:
        self._generation += 1
        self._state = VerifierState.CLOSED
        self._note_id = None
        self.content = None
        self.error = None


__all__ = ["NoteVerifier", "VerifierState", "EMPTY_PASSWORD_MESSAGE"]
