from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from .models import AuthResult, Note, NoteContent, NoteDraft, User


DEFAULT_API_BASE = "http://localhost:5000/api"
GENERIC_FAILURE = "Request failed"

logger = structlog.get_logger(__name__)

_M = TypeVar("_M", bound=BaseModel)


class RequestError(RuntimeError):
    """
    Uniform failure shape for every API call.

    `message` is safe to show to the user; `status` is the HTTP status when the
    server answered, or None when no response was received.
    """

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class NetworkError(RequestError):
    """No response: connection refused, DNS failure, timeout."""


class MalformedResponseError(RequestError):
    """Success status, but the body is not JSON or lacks required fields."""


def _bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return GENERIC_FAILURE
    msg = body.get("msg") if isinstance(body, dict) else None
    if isinstance(msg, str) and msg:
        return msg
    return f"HTTP {resp.status_code}"


class NotesApiClient:
    """
    Async client for the secure-notes HTTP JSON API.

    Notes
    - Every call is a single HTTP exchange; there are no retries.
    - Authorization is per call: authenticated helpers take the bearer token as
      an argument and the client never keeps one as shared state.
    - Request bodies are never logged (they carry passwords).
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_API_BASE,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "NotesApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --------------- Gateway ---------------
    async def request(
        self,
        path: str,
        *,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform one request against `base_url + path` and return the decoded JSON.

        Raises NetworkError when no response arrives, RequestError on a
        non-success status and MalformedResponseError when a body cannot be
        decoded or a success body is not JSON. No raw httpx exception escapes.
        """
        url = f"{self._base_url}{path}"
        merged = {"Content-Type": "application/json", **(headers or {})}
        try:
            resp = await self._client.request(method, url, headers=merged, json=body)
        except httpx.TransportError as exc:
            logger.warning("api_request_failed", method=method, path=path, error=type(exc).__name__)
            raise NetworkError("Network request failed") from exc
        except httpx.HTTPError as exc:
            # e.g. DecodingError: a response arrived but its body could not be read
            logger.warning("api_response_unreadable", method=method, path=path, error=type(exc).__name__)
            raise MalformedResponseError("Malformed response from server") from exc

        logger.debug("api_response", method=method, path=path, status=resp.status_code)
        if not resp.is_success:
            raise RequestError(_error_message(resp), status=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponseError("Malformed response from server", status=resp.status_code) from exc

    # --------------- Endpoints ---------------
    async def register(self, name: str, email: str, password: str) -> AuthResult:
        data = await self.request(
            "/auth/register",
            method="POST",
            body={"name": name, "email": email, "password": password},
        )
        return self._parse(AuthResult, data)

    async def login(self, email: str, password: str) -> AuthResult:
        data = await self.request(
            "/auth/login",
            method="POST",
            body={"email": email, "password": password},
        )
        return self._parse(AuthResult, data)

    async def profile(self, token: str) -> User:
        data = await self.request("/profile/me", headers=_bearer(token))
        return self._parse(User, data)

    async def create_note(self, draft: NoteDraft, token: str) -> Note:
        data = await self.request(
            "/notes/create",
            method="POST",
            headers=_bearer(token),
            body=draft.model_dump(),
        )
        return self._parse(Note, data)

    async def verify_note(self, note_id: str, password: str) -> NoteContent:
        data = await self.request(
            f"/notes/{quote(note_id, safe='')}/verify",
            method="POST",
            body={"password": password},
        )
        return self._parse(NoteContent, data)

    # --------------- Internal ---------------
    @staticmethod
    def _parse(model: Type[_M], data: Any) -> _M:
        try:
            return model.model_validate(data)
        except ValidationError as ve:
            logger.warning("api_malformed_response", model=model.__name__, errors=ve.error_count())
            raise MalformedResponseError(f"Malformed response from server ({model.__name__})") from ve


__all__ = [
    "DEFAULT_API_BASE",
    "GENERIC_FAILURE",
    "MalformedResponseError",
    "NetworkError",
    "NotesApiClient",
    "RequestError",
]
