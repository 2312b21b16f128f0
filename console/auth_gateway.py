from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from console.backend_client import BackendClient, BackendError, ValidationError
from console.config import dlog
from console.token_store import TokenStore


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def split_name(full_name: Optional[str]) -> tuple[str, str]:
    parts = _clean(full_name).split(" ")
    first = parts[0] if parts else ""
    last = " ".join(p for p in parts[1:] if p)
    return first, last


@dataclass
class SettingsForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    current_password: str = ""
    new_password: str = ""
    confirm_password: str = ""

    @property
    def wants_password_change(self) -> bool:
        return bool(self.current_password or self.new_password or self.confirm_password)

    @property
    def full_name(self) -> str:
        return f"{_clean(self.first_name)} {_clean(self.last_name)}".strip()


class AuthGateway:
    """Login, OTP password reset and admin settings against /admin/*."""

    def __init__(self, client: BackendClient, token_store: TokenStore) -> None:
        self._client = client
        self._store = token_store

    def login(self, identifier: str, password: str) -> Dict[str, Any]:
        identifier = _clean(identifier)
        if not identifier or not password:
            raise ValidationError("Username and password are required.")
        data = self._client.post_json(
            "/admin/login",
            {"username": identifier, "password": password},
            auth=False,
            fallback_error="Login failed",
        )
        token = data.get("token")
        if not token:
            raise BackendError(data.get("msg") or "Login failed", 502)
        profile = data.get("admin") or {}
        self._store.store_session(token, profile)
        dlog("admin_login", {"username": profile.get("username") or identifier})
        return profile

    def request_password_reset(self, email: str) -> str:
        email = _clean(email)
        if not email:
            raise ValidationError("Email is required.")
        self._client.post_json("/admin/forgot-password", {"email": email}, auth=False)
        dlog("admin_reset_requested", email)
        return email

    def confirm_password_reset(self, email: str, otp: str, new_password: str, confirm_password: str) -> None:
        email = _clean(email)
        otp = _clean(otp)
        if not email or not otp or not new_password or not confirm_password:
            raise ValidationError("Email, OTP and both password fields are required.")
        if new_password != confirm_password:
            raise ValidationError("Passwords do not match!")
        self._client.post_json(
            "/admin/reset-password",
            {
                "email": email,
                "otp": otp,
                "newPassword": new_password,
                "confirmPassword": confirm_password,
            },
            auth=False,
        )
        dlog("admin_reset_confirmed", email)

    def logout(self) -> None:
        self._store.clear()
        dlog("admin_logout", "session cleared")

    def load_profile(self) -> Dict[str, str]:
        data = self._client.get_json("/admin/me")
        admin = data.get("admin") or {}
        first, last = split_name(admin.get("name"))
        return {"firstName": first, "lastName": last, "email": admin.get("email") or ""}

    def save_settings(self, form: SettingsForm) -> Dict[str, Any]:
        """Change the password (when requested) and then update the profile.

        The profile update is only attempted once the password change has
        succeeded.
        """
        password_changed = False
        if form.wants_password_change:
            if not (form.current_password and form.new_password and form.confirm_password):
                raise ValidationError("Please fill all password fields to change password.")
            if form.new_password != form.confirm_password:
                raise ValidationError("Passwords do not match!")
            self._client.put_json(
                "/admin/change-password",
                {"currentPassword": form.current_password, "newPassword": form.new_password},
                fallback_error="Password change failed",
            )
            password_changed = True
            dlog("admin_password_changed", "ok")

        self._client.put_json(
            "/admin/me",
            {"name": form.full_name, "email": _clean(form.email)},
            fallback_error="Profile update failed",
        )
        self._store.update_profile(name=form.full_name, email=_clean(form.email) or None)
        return {"password_changed": password_changed, "profile": self._store.public_profile()}
