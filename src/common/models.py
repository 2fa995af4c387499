from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class View(StrEnum):
    REGISTER = "register"
    LOGIN = "login"
    DASHBOARD = "dashboard"
    UNLOCK = "unlock"


class User(BaseModel):
    """Authenticated account as returned by the auth and profile endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", min_length=1)
    name: str
    email: str


class AuthResult(BaseModel):
    token: str = Field(..., min_length=1)
    user: User


class Note(BaseModel):
    """
    Server-assigned note returned by creation.

    The password is write-only: it is never part of this model, even if a
    server were to echo it back.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id", min_length=1)
    title: str = ""
    content: str = ""


class NoteDraft(BaseModel):
    """Client-local form state for a note being composed."""

    title: str = ""
    content: str = ""
    password: str = Field(default="", repr=False)

    def is_complete(self) -> bool:
        return bool(self.title and self.content and self.password)


class NoteContent(BaseModel):
    title: str
    content: str


class StartView(BaseModel):
    view: View
    note_id: Optional[str] = None


__all__ = [
    "AuthResult",
    "Note",
    "NoteContent",
    "NoteDraft",
    "StartView",
    "User",
    "View",
]
