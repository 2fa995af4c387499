from __future__ import annotations

from typing import Callable, List, Optional

import structlog

from common.api import NotesApiClient, RequestError
from common.links import build_share_link
from common.models import Note, NoteDraft


logger = structlog.get_logger(__name__)

Alert = Callable[[str], None]

INCOMPLETE_DRAFT_MESSAGE = "Title, content and password are all required"


class NoteComposer:
    """
    Collects a `NoteDraft`, submits it and derives the share link.

    Notes
    - One creation at a time: `create_note` while another is pending does nothing.
    - On failure the draft is left untouched and the message goes to `alert`.
    - `discard()` drops the result of any creation still in flight, e.g. after
      logout.
    """

    def __init__(self, api: NotesApiClient, *, origin: str, alert: Optional[Alert] = None) -> None:
        self._api = api
        self._origin = origin
        self._alert = alert
        self._generation = 0
        self.draft = NoteDraft()
        self.notes: List[Note] = []
        self.share_link: Optional[str] = None
        self.error: Optional[str] = None
        self.last_error: Optional[RequestError] = None
        self.pending = False

    async def create_note(self, token: str, draft: Optional[NoteDraft] = None) -> Optional[Note]:
        """
        Create a note from the current draft (or `draft`, which replaces it).

        Returns the created Note, or None when nothing was created.
        Raises ValueError if `token` is empty: creation is authenticated.
        """
        if not token:
            raise ValueError("token is required")
        if self.pending:
            logger.debug("create_note_ignored_while_pending")
            return None
        if draft is not None:
            self.draft = draft
        if not self.draft.is_complete():
            self._fail(INCOMPLETE_DRAFT_MESSAGE)
            return None

        generation = self._generation
        self.pending = True
        self.error = None
        self.last_error = None
        try:
            note = await self._api.create_note(self.draft, token)
        except RequestError as err:
            if generation == self._generation:
                self.last_error = err
                self._fail(err.message)
            return None
        finally:
            if generation == self._generation:
                self.pending = False

        if generation != self._generation:
            logger.debug("create_note_result_discarded", note_id=note.id)
            return None

        self.share_link = build_share_link(self._origin, note.id)
        self.notes.append(note)
        self.draft = NoteDraft()
        logger.info("note_created", note_id=note.id)
        return note

    def discard(self) -> None:
        self._generation += 1
        self.pending = False

    def _fail(self, message: str) -> None:
        self.error = message
        logger.warning("create_note_failed", error=message)
        if self._alert is not None:
            self._alert(message)


__all__ = ["NoteComposer", "INCOMPLETE_DRAFT_MESSAGE"]
