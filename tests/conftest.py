import json
import os
import re
import sys

import httpx
import pytest


def pytest_configure():
    # Ensure `src/` is importable as top-level for `common.*`, `notes.*`, ... imports
    root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    src_path = os.path.join(root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


API_BASE = "http://api.test/api"
ORIGIN = "http://app.test"

_VERIFY_RE = re.compile(r"/notes/([^/]+)/verify")


class FakeNoteServer:
    """In-memory stand-in for the notes API, used as an httpx.MockTransport handler."""

    def __init__(self) -> None:
        self.users = {}  # email -> {"password", "user"}
        self.tokens = {}  # token -> user dict
        self.notes = {}  # id -> {"password", "title", "content"}
        self.requests = []
        self.fail_profile = False

    def add_user(self, name: str, email: str, password: str, *, token: str | None = None) -> str:
        user = {"_id": f"u{len(self.users) + 1}", "name": name, "email": email}
        self.users[email] = {"password": password, "user": user}
        tok = token or f"tok-{user['_id']}"
        self.tokens[tok] = user
        return tok

    def add_note(self, note_id: str, title: str, content: str, password: str) -> None:
        self.notes[note_id] = {"password": password, "title": title, "content": content}

    def paths(self) -> list:
        return [r.url.path for r in self.requests]

    def _json(self, status: int, body) -> httpx.Response:
        return httpx.Response(status, json=body)

    def _auth_user(self, request: httpx.Request):
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return self.tokens.get(header[len("Bearer "):])

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        body = json.loads(request.content) if request.content else {}

        if path == "/auth/register" and request.method == "POST":
            if body.get("email") in self.users:
                return self._json(400, {"msg": "User already exists"})
            tok = self.add_user(body["name"], body["email"], body["password"])
            return self._json(201, {"token": tok, "user": self.tokens[tok]})

        if path == "/auth/login" and request.method == "POST":
            entry = self.users.get(body.get("email"))
            if entry is None or entry["password"] != body.get("password"):
                return self._json(400, {"msg": "Invalid credentials"})
            tok = next(t for t, u in self.tokens.items() if u is entry["user"])
            return self._json(200, {"token": tok, "user": entry["user"]})

        if path == "/profile/me" and request.method == "GET":
            user = self._auth_user(request)
            if user is None or self.fail_profile:
                return self._json(401, {"msg": "Token is not valid"})
            return self._json(200, user)

        if path == "/notes/create" and request.method == "POST":
            if self._auth_user(request) is None:
                return self._json(401, {"msg": "Token is not valid"})
            if not body.get("title") or not body.get("password"):
                return self._json(400, {"msg": "Title and password are required"})
            note_id = f"n{len(self.notes) + 1}"
            self.add_note(note_id, body["title"], body.get("content", ""), body["password"])
            return self._json(
                201,
                {"_id": note_id, "title": body["title"], "content": body.get("content", ""), "createdAt": "2024-01-01"},
            )

        m = _VERIFY_RE.fullmatch(path)
        if m and request.method == "POST":
            note = self.notes.get(m.group(1))
            if note is None or note["password"] != body.get("password"):
                return self._json(401, {"msg": "Invalid password or note"})
            return self._json(200, {"title": note["title"], "content": note["content"]})

        return self._json(404, {"msg": "Not found"})


@pytest.fixture
def server() -> FakeNoteServer:
    return FakeNoteServer()
