from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

import structlog
from cryptography.fernet import Fernet, InvalidToken


logger = structlog.get_logger(__name__)


class SessionKeyError(RuntimeError):
    """The configured session key is not a valid Fernet key."""


def _to_fernet(key: str | bytes) -> Fernet:
    """Construct a Fernet instance from a user-provided key.

    The key must be a URL-safe base64-encoded 32-byte key (str or bytes),
    as returned by `cryptography.fernet.Fernet.generate_key()`.
    """
    if isinstance(key, str):
        key_bytes = key.encode("utf-8")
    else:
        key_bytes = key
    try:
        return Fernet(key_bytes)
    except ValueError as ex:
        raise SessionKeyError("Invalid session key: expected a urlsafe base64 32-byte Fernet key") from ex


class FileSessionStorage:
    """
    Durable storage for the bearer token, encrypted at rest using Fernet.

    - `load()` returns the stored token, or None if the file does not exist.
    - `save(token)` writes `{"token": ...}` encrypted, creating parent dirs;
      the file is created with owner-only permissions.
    - `delete()` removes the file if present.
    """

    def __init__(self, path: os.PathLike[str] | str, *, fernet_key: str | bytes) -> None:
        self._path = Path(path).expanduser()
        self._fernet = _to_fernet(fernet_key)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        """Read and decrypt the stored token.

        Raises ValueError if the file cannot be decrypted or parsed.
        """
        if not self._path.exists():
            return None
        data = self._path.read_bytes()
        try:
            decrypted = self._fernet.decrypt(data)
        except InvalidToken as ex:
            raise ValueError("Failed to decrypt session: invalid Fernet token") from ex
        try:
            raw = json.loads(decrypted.decode("utf-8"))
        except ValueError as ex:
            raise ValueError("Failed to parse decrypted session JSON") from ex
        token = raw.get("token") if isinstance(raw, dict) else None
        if token is not None and not isinstance(token, str):
            raise ValueError("Stored session token is not a string")
        return token or None

    def save(self, token: str) -> None:
        payload = json.dumps({"token": token}, separators=(",", ":")).encode("utf-8")
        ciphertext = self._fernet.encrypt(payload)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(ciphertext)
        logger.debug("session_saved", path=str(self._path))

    def delete(self) -> None:
        self._path.unlink(missing_ok=True)
