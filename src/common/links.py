from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit

from .models import StartView, View


NOTE_PATH_PREFIX = "/note/"
NEUTRAL_PATH = "/"

# Identifier is one or more ASCII alphanumerics; nothing else may follow.
_NOTE_PATH_RE = re.compile(r"/note/([A-Za-z0-9]+)")


def build_share_link(origin: str, note_id: str) -> str:
    """Return the shareable URL for a note: `origin + "/note/" + id`."""
    return f"{origin.rstrip('/')}{NOTE_PATH_PREFIX}{note_id}"


def match_note_path(path: Optional[str]) -> Optional[str]:
    """Return the note identifier if `path` is exactly `/note/<alphanumeric>`."""
    m = _NOTE_PATH_RE.fullmatch(path or "")
    if not m:
        return None
    return m.group(1)


def note_id_from_link(link: str) -> Optional[str]:
    """Extract the note identifier from a full share link or a bare path."""
    try:
        path = urlsplit(link.strip()).path
    except ValueError:
        return None
    return match_note_path(path)


def resolve_start_view(path: Optional[str], token: Optional[str]) -> StartView:
    """
    Decide the starting view from the initial navigation path.

    A note path only seeds the unlock view when no session token is held, so a
    deep link never pulls an authenticated session into the unlock flow.
    """
    note_id = match_note_path(path)
    if note_id is not None and not token:
        return StartView(view=View.UNLOCK, note_id=note_id)
    return StartView(view=View.LOGIN)


__all__ = [
    "NEUTRAL_PATH",
    "build_share_link",
    "match_note_path",
    "note_id_from_link",
    "resolve_start_view",
]
