from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from console.backend_client import BackendClient
from console.config import dlog


DASHBOARD_WIDGETS: Mapping[str, str] = {
    "stats": "/dashboard-data/stats",
    "recentMembers": "/dashboard-data/recent-members",
    "recentPurchases": "/dashboard-data/recent-purchases",
}


@dataclass
class WidgetSnapshot:
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    updated_at: Optional[float] = None
    ticks: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"data": self.data, "error": self.error, "updated_at": self.updated_at, "ticks": self.ticks}


class WidgetPoller:
    """Re-fetches one dashboard widget on a fixed interval, replacing its snapshot."""

    def __init__(self, name: str, path: str, client: BackendClient, interval: float) -> None:
        self.name = name
        self.path = path
        self.interval = interval
        self._client = client
        self._lock = threading.Lock()
        self._snapshot = WidgetSnapshot()
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def refresh(self, stop: Optional[threading.Event] = None) -> WidgetSnapshot:
        data: Optional[Dict[str, Any]] = None
        error: Optional[str] = None
        try:
            data = self._client.get_json(self.path)
        except ValueError as e:
            error = str(e)
            dlog("dashboard_widget_error", {"widget": self.name, "error": error})
        if stop is not None and stop.is_set():
            # Torn down while the request was in flight.
            return self.snapshot()
        with self._lock:
            previous = self._snapshot
            self._snapshot = WidgetSnapshot(
                data=data if error is None else previous.data,
                error=error,
                updated_at=time.time() if error is None else previous.updated_at,
                ticks=previous.ticks + 1,
            )
            return self._snapshot

    def snapshot(self) -> WidgetSnapshot:
        with self._lock:
            return self._snapshot

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            self.refresh(stop)

    def start(self) -> None:
        if self.running:
            return
        stop = threading.Event()
        self._stop = stop
        self._thread = threading.Thread(target=self._run, args=(stop,), name=f"dashboard-{self.name}", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 1.0) -> None:
        thread = self._thread
        if self._stop is not None:
            self._stop.set()
        if thread is not None and thread is not threading.current_thread():
            # A request in flight can outlast the timeout; its result is discarded.
            thread.join(timeout)
        self._thread = None
        self._stop = None


class DashboardMonitor:
    """Independent pollers for the dashboard statistics and "recent" widgets."""

    def __init__(
        self,
        client: BackendClient,
        interval: float,
        enabled: bool = True,
        widgets: Mapping[str, str] = DASHBOARD_WIDGETS,
    ) -> None:
        self.enabled = enabled
        self.interval = interval
        self.pollers: Dict[str, WidgetPoller] = {
            name: WidgetPoller(name, path, client, interval) for name, path in widgets.items()
        }

    @property
    def running(self) -> bool:
        return any(p.running for p in self.pollers.values())

    def refresh_all(self) -> Dict[str, Dict[str, Any]]:
        for poller in self.pollers.values():
            poller.refresh()
        return self.snapshot()

    def ensure_running(self) -> Dict[str, Dict[str, Any]]:
        """Start polling for an open dashboard view; returns the current snapshot."""
        if not self.enabled:
            return self.refresh_all()
        if not self.running:
            dlog("dashboard_polling_start", {"interval": self.interval, "widgets": list(self.pollers)})
            self.refresh_all()
            for poller in self.pollers.values():
                poller.start()
        return self.snapshot()

    def stop(self) -> None:
        if self.running:
            dlog("dashboard_polling_stop", list(self.pollers))
        for poller in self.pollers.values():
            poller.stop()

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        return {name: poller.snapshot().to_dict() for name, poller in self.pollers.items()}
