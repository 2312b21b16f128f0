from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from console.backend_client import BackendClient, BackendError, ValidationError
from console.config import dlog


PREVIEW_URL_PREFIX = "/api/previews/"


def preview_kind(mime_type: Optional[str]) -> str:
    """How a previewed asset is rendered: "pdf" in a frame, otherwise "image"."""
    return "pdf" if (mime_type or "").lower() == "application/pdf" else "image"


@dataclass
class PreviewObject:
    key: str
    content: bytes
    mime_type: str
    title: str
    created_at: float = field(default_factory=time.time)

    @property
    def url(self) -> str:
        return PREVIEW_URL_PREFIX + self.key

    def describe(self) -> Dict[str, object]:
        return {
            "url": self.url,
            "key": self.key,
            "mimeType": self.mime_type,
            "kind": preview_kind(self.mime_type),
            "title": self.title,
            "size": len(self.content),
        }


class PreviewRegistry:
    """Transient object URLs for authenticated binary previews.

    A preview is fetched once when a view opens it and served from memory
    until the view closes (revoke) or the console tears down (revoke_all).
    """

    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._lock = threading.Lock()
        self._objects: Dict[str, PreviewObject] = {}

    def _open(self, path: str, title: str, mime_hint: Optional[str], fallback_error: str) -> PreviewObject:
        content, content_type = self._client.fetch_blob(path, fallback_error=fallback_error)
        mime_type = mime_hint or content_type
        obj = PreviewObject(key=secrets.token_urlsafe(16), content=content, mime_type=mime_type, title=title)
        with self._lock:
            self._objects[obj.key] = obj
        dlog("preview_opened", {"path": path, "key": obj.key, "mime_type": mime_type, "size": len(content)})
        return obj

    def open_ebook(self, ebook_id: str, title: str = "", mime_type: Optional[str] = None) -> PreviewObject:
        if not ebook_id:
            raise ValidationError("E-Book id is required.")
        return self._open(f"/ebooks/{ebook_id}/admin-fetch", title, mime_type, "Failed to fetch ebook")

    def open_certificate(self, certificate_id: str, title: str = "") -> PreviewObject:
        if not certificate_id:
            raise ValidationError("Certificate id is required.")
        return self._open(
            f"/certificates/{certificate_id}/admin-fetch", title, "application/pdf", "Failed to fetch certificate"
        )

    def get(self, key: str) -> Optional[PreviewObject]:
        with self._lock:
            return self._objects.get(key)

    def revoke(self, key: str) -> bool:
        with self._lock:
            removed = self._objects.pop(key, None) is not None
        if removed:
            dlog("preview_revoked", key)
        return removed

    def revoke_all(self) -> int:
        with self._lock:
            count = len(self._objects)
            self._objects.clear()
        if count:
            dlog("preview_revoked_all", count)
        return count

    def open_count(self) -> int:
        with self._lock:
            return len(self._objects)

    def video_signed_url(self, video_id: str) -> str:
        """Ask the backend for a time-limited playback URL for a workout video."""
        if not video_id:
            raise ValidationError("Video id is required.")
        data = self._client.get_json(f"/workout-library/signed-url/{video_id}", fallback_error="Failed to get signed URL")
        signed = data.get("signedUrl")
        if not signed:
            raise BackendError(data.get("error") or "Failed to get signed URL", 502)
        return signed
