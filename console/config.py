import os
import json
import sys
from dataclasses import dataclass
from typing import Optional


# Debug flag: default off. Enable via CLI arg "--console-debug" or env CONSOLE_DEBUG=1.
DEBUG = "--console-debug" in sys.argv or os.environ.get("CONSOLE_DEBUG") == "1"

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_POLL_SECONDS = 10.0


def dlog(label: str, data):
    if not DEBUG:
        return
    try:
        printable = data if isinstance(data, str) else json.dumps(data, indent=2, ensure_ascii=False)
    except Exception:
        printable = str(data)
    print(f"[console-debug] {label}: {printable}")


def _truthy(val: Optional[str], default: bool = False) -> bool:
    if val is None or not val.strip():
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        dlog("config_invalid_number", {"name": name, "value": raw})
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class ConsoleConfig:
    api_url: str
    timeout: float
    session_file: Optional[str]
    event_log_path: Optional[str]
    poll_seconds: float
    polling_enabled: bool

    @property
    def asset_base(self) -> str:
        """Origin used for uploaded images (the API base without a trailing /api)."""
        base = self.api_url.rstrip("/")
        if base.endswith("/api"):
            base = base[: -len("/api")]
        return base


def load_console_config() -> ConsoleConfig:
    """Read console settings from env."""
    api_url = (os.environ.get("BACKEND_API_URL") or os.environ.get("VITE_API_URL") or DEFAULT_API_URL).strip()
    cfg = ConsoleConfig(
        api_url=api_url.rstrip("/"),
        timeout=_float_env("BACKEND_TIMEOUT", 30.0),
        session_file=os.environ.get("CONSOLE_SESSION_FILE") or os.environ.get("ADMIN_SESSION_FILE"),
        event_log_path=os.environ.get("CONSOLE_EVENT_LOG"),
        poll_seconds=_float_env("DASHBOARD_POLL_SECONDS", DEFAULT_POLL_SECONDS),
        polling_enabled=_truthy(os.environ.get("ENABLE_DASHBOARD_POLLING"), default=True),
    )
    dlog(
        "console_config",
        {
            "api_url": cfg.api_url,
            "timeout": cfg.timeout,
            "session_file": cfg.session_file,
            "poll_seconds": cfg.poll_seconds,
            "polling_enabled": cfg.polling_enabled,
        },
    )
    return cfg
