from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import requests

from console.config import dlog
from console.token_store import TokenStore


GENERIC_ERROR = "Something went wrong"


class ValidationError(ValueError):
    """Input rejected before any backend call was made."""


class ConfirmationRequired(ValidationError):
    """A destructive action was requested without explicit confirmation."""


class BackendError(ValueError):
    """Non-2xx backend response; the message is the backend's own text."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(ValueError):
    """Backend unreachable or its response could not be parsed."""

    def __init__(self, message: str = GENERIC_ERROR) -> None:
        super().__init__(message)


def extract_message(payload: Any, fallback: str) -> str:
    if not isinstance(payload, dict):
        return fallback
    for key in ("msg", "error", "message"):
        value = payload.get(key)
        if isinstance(value, dict):
            value = value.get("message")
        if isinstance(value, str) and value.strip():
            return value
    return fallback


class BackendClient:
    """HTTP seam to the fitness-platform backend.

    Every request attaches the stored bearer token when one exists. Errors
    are raised as BackendError (backend message verbatim) or NetworkError
    (generic message); nothing is retried.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token_store: TokenStore,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token_store = token_store
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _headers(self, auth: bool) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        token = self._token_store.get_token() if auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        return self._session.request(method, url, timeout=self._timeout, **kwargs)

    def _perform(self, method: str, path: str, *, auth: bool, **kwargs: Any) -> requests.Response:
        url = self._url(path)
        dlog(
            "backend_request",
            {
                "method": method,
                "url": url,
                "auth": bool(auth and self._token_store.get_token()),
                "json_preview": str(kwargs.get("json"))[:256] if kwargs.get("json") is not None else None,
                "files": sorted((kwargs.get("files") or {}).keys()),
            },
        )
        try:
            resp = self._send(method, url, headers=self._headers(auth), **kwargs)
        except requests.RequestException as e:
            dlog("backend_unreachable", {"url": url, "error": str(e)})
            raise NetworkError() from e
        dlog("backend_response", {"method": method, "url": url, "status": resp.status_code})
        return resp

    def _raise_for_status(self, resp: requests.Response, fallback_error: str) -> None:
        if resp.status_code < 400:
            return
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        raise BackendError(extract_message(payload, fallback_error), resp.status_code)

    def request_json(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, str]] = None,
        files: Optional[Dict[str, Tuple[str, bytes, str]]] = None,
        auth: bool = True,
        fallback_error: str = GENERIC_ERROR,
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json
        if data is not None:
            kwargs["data"] = data
        if files:
            kwargs["files"] = files
        resp = self._perform(method, path, auth=auth, **kwargs)
        self._raise_for_status(resp, fallback_error)
        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as e:
            dlog("backend_invalid_json", {"path": path, "error": str(e)})
            raise NetworkError() from e
        return body if isinstance(body, dict) else {"data": body}

    def get_json(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        return self.request_json("GET", path, **kwargs)

    def post_json(self, path: str, payload: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Dict[str, Any]:
        return self.request_json("POST", path, json=payload or {}, **kwargs)

    def put_json(self, path: str, payload: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        return self.request_json("PUT", path, json=payload, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        return self.request_json("DELETE", path, **kwargs)

    def fetch_blob(self, path: str, fallback_error: str = GENERIC_ERROR) -> Tuple[bytes, str]:
        """Fetch an authenticated binary asset, returning (content, content type)."""
        resp = self._perform("GET", path, auth=True)
        self._raise_for_status(resp, fallback_error)
        content_type = resp.headers.get("Content-Type", "application/octet-stream").split(";")[0].strip()
        return resp.content, content_type
