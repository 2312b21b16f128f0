import json
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from console.backend_client import BackendClient
from console.token_store import TokenStore


BASE_URL = "http://backend.test/api"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=None, headers=None):
        self.status_code = status_code
        if content is None:
            content = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self.content = content
        self.headers = headers or {"Content-Type": "application/json"}

    def json(self):
        return json.loads(self.content.decode("utf-8"))


@dataclass
class Call:
    method: str
    path: str
    kwargs: Dict[str, Any] = field(default_factory=dict)


class FakeBackend:
    """Canned backend routes keyed by (method, path) with a record of every call."""

    def __init__(self, base_url=BASE_URL):
        self.base_url = base_url
        self.routes: Dict[tuple, Any] = {}
        self.calls: List[Call] = []

    def on(self, method, path, payload=None, status=200, content=None, headers=None):
        self.routes[(method, path)] = FakeResponse(status, payload, content, headers)

    def fail(self, method, path, exc):
        self.routes[(method, path)] = exc

    def send(self, method, url, **kwargs):
        path = url[len(self.base_url):]
        self.calls.append(Call(method, path, kwargs))
        handler = self.routes.get((method, path))
        if handler is None:
            return FakeResponse(404, {"msg": f"No route for {method} {path}"})
        if isinstance(handler, Exception):
            raise handler
        return handler

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method and c.path == path]


@pytest.fixture
def backend(monkeypatch):
    fake = FakeBackend()
    monkeypatch.setattr(BackendClient, "_send", lambda self, method, url, **kw: fake.send(method, url, **kw))
    return fake


@pytest.fixture
def store():
    return TokenStore()


@pytest.fixture
def client(backend, store):
    return BackendClient(base_url=BASE_URL, token_store=store)


@pytest.fixture
def console_app(monkeypatch, backend):
    """Reload the console app with a clean env, wired to the fake backend."""

    def _reload_app(extra_env=None):
        keys_to_clear = [
            "BACKEND_API_URL",
            "VITE_API_URL",
            "BACKEND_TIMEOUT",
            "CONSOLE_SESSION_FILE",
            "ADMIN_SESSION_FILE",
            "CONSOLE_EVENT_LOG",
            "DASHBOARD_POLL_SECONDS",
            "ENABLE_DASHBOARD_POLLING",
        ]
        for key in keys_to_clear:
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setenv("BACKEND_API_URL", BASE_URL)
        monkeypatch.setenv("ENABLE_DASHBOARD_POLLING", "0")
        for k, v in (extra_env or {}).items():
            monkeypatch.setenv(k, str(v))

        sys.modules.pop("fitcoach_admin", None)
        import fitcoach_admin

        monkeypatch.setattr(fitcoach_admin.console_state.client, "_send", backend.send)
        return fitcoach_admin, TestClient(fitcoach_admin.app)

    return _reload_app
