from __future__ import annotations

import os
import json
import tempfile
import threading
from typing import Any, Dict, Optional

from console.config import dlog


STORE_SCHEMA_VERSION = 1

TOKEN_KEY = "adminToken"
PROFILE_KEY = "admin"


class TokenStore:
    """Persistent key-value storage for the admin session.

    Holds the opaque bearer token and the cached admin profile. Presence of
    the token key is the only login signal; nothing here tracks expiry.
    Without a path the store lives in memory for the process lifetime.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        self.items: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def load(self) -> None:
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r") as f:
                raw = json.load(f)
        except Exception as e:
            dlog("session_store_load_error", f"Could not read session store: {e}")
            return

        if raw.get("version") != STORE_SCHEMA_VERSION:
            dlog("session_store_load_skip", f"Incompatible session store version: {raw.get('version')}")
            return
        items = raw.get("items")
        if not isinstance(items, dict):
            dlog("session_store_load_skip", "Session items not a dict")
            return
        with self._lock:
            self.items = dict(items)

    def save(self) -> None:
        if not self.path:
            return
        with self._lock:
            payload = {"version": STORE_SCHEMA_VERSION, "items": dict(self.items)}
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with tempfile.NamedTemporaryFile("w", delete=False, dir=os.path.dirname(self.path) or ".") as tmp:
                json.dump(payload, tmp)
                tmp.flush()
                os.fsync(tmp.fileno())
                temp_name = tmp.name
            os.replace(temp_name, self.path)
        except Exception as e:
            dlog("session_store_save_error", str(e))

    # ---------- key-value access ----------
    def get_item(self, key: str) -> Any:
        with self._lock:
            return self.items.get(key)

    def set_item(self, key: str, value: Any) -> None:
        with self._lock:
            self.items[key] = value
        self.save()

    def remove_item(self, key: str) -> None:
        with self._lock:
            removed = self.items.pop(key, None) is not None
        if removed:
            self.save()

    # ---------- session helpers ----------
    def get_token(self) -> Optional[str]:
        token = self.get_item(TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def get_profile(self) -> Optional[Dict[str, Any]]:
        profile = self.get_item(PROFILE_KEY)
        return profile if isinstance(profile, dict) else None

    def is_logged_in(self) -> bool:
        return self.get_token() is not None

    def store_session(self, token: str, profile: Optional[Dict[str, Any]]) -> None:
        with self._lock:
            self.items[TOKEN_KEY] = token
            self.items[PROFILE_KEY] = profile or {}
        self.save()

    def update_profile(self, **fields: Any) -> None:
        with self._lock:
            profile = dict(self.items.get(PROFILE_KEY) or {})
            profile.update({k: v for k, v in fields.items() if v is not None})
            self.items[PROFILE_KEY] = profile
        self.save()

    def clear(self) -> None:
        with self._lock:
            self.items.pop(TOKEN_KEY, None)
            self.items.pop(PROFILE_KEY, None)
        self.save()

    def public_profile(self) -> Dict[str, Any]:
        """Return the cached profile without the token, for the UI header."""
        profile = self.get_profile() or {}
        return {
            "logged_in": self.is_logged_in(),
            "id": profile.get("id") or profile.get("_id"),
            "username": profile.get("username"),
            "name": profile.get("name"),
            "email": profile.get("email"),
        }
