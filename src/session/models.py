from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from common.models import User


class Session(BaseModel):
    """
    Current bearer token and the user it identifies.

    Fields
    - token: opaque bearer credential, or None when logged out.
    - user: the authenticated user; may be None only while a token restored
      from storage is waiting for its profile fetch.
    """

    token: Optional[str] = Field(default=None, repr=False)
    user: Optional[User] = None

    @model_validator(mode="after")
    def _user_requires_token(self) -> "Session":
        if self.user is not None and not self.token:
            raise ValueError("session user requires a token")
        return self

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def empty(cls) -> "Session":
        return cls()
