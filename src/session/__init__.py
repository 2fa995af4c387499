"""
Auth session state and its optional encrypted persistence.

Only the bearer token is persisted; the user profile is re-fetched after a
restart.
"""

from .models import Session
from .store import SessionStore

__all__ = ["Session", "SessionStore"]
