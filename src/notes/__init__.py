"""
Password-gated note sharing.

Modules:
- composer: collect a draft, create the note, expose its share link
- verifier: verify-then-reveal state machine for a shared note
"""

__all__ = [
    "composer",
    "verifier",
]
