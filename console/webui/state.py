from __future__ import annotations

import os
import json
import time
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from console.auth_gateway import AuthGateway
from console.backend_client import BackendClient
from console.commerce import PLAN_SPEC, PURCHASE_SPEC, RECEIPT_SPEC, PurchaseLedger, ReceiptDesk
from console.config import ConsoleConfig, dlog
from console.content import CERTIFICATE_SPEC, EBOOK_SPEC, VIDEO_SPEC, EbookShelf, VideoLibrary
from console.members import MEMBER_SPEC, MemberDirectory
from console.poller import DashboardMonitor
from console.previews import PreviewRegistry
from console.resources import ResourceManager
from console.token_store import TokenStore


@dataclass
class ConsoleEvent:
    ts: float
    title: str
    detail: str | None = None


class ConsoleEventLog:
    """In-memory ring buffer for recent console activity."""

    def __init__(self, max_events: int = 200, path: Optional[str] = None) -> None:
        self.max_events = max_events
        self.events: List[ConsoleEvent] = []
        self.path = path
        self._load()

    def add(self, title: str, detail: str | None = None) -> None:
        self.events.append(ConsoleEvent(ts=time.time(), title=title, detail=detail))
        if len(self.events) > self.max_events:
            self.events = self.events[-self.max_events :]
        self._persist_last()

    def snapshot(self) -> List[Dict[str, Any]]:
        return [
            {"ts": e.ts, "title": e.title, "detail": e.detail}
            for e in reversed(self.events)
        ]

    # ---------- persistence helpers ----------
    def _load(self) -> None:
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    data = json.loads(line)
                    self.events.append(
                        ConsoleEvent(
                            ts=float(data.get("ts") or time.time()),
                            title=data.get("title") or "Event",
                            detail=data.get("detail"),
                        )
                    )
            self.events = self.events[-self.max_events :]
        except Exception as e:
            dlog("event_log_load_error", str(e))
            self.events = []

    def _persist_last(self) -> None:
        if not self.path or not self.events:
            return
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "a") as f:
                last = self.events[-1]
                f.write(json.dumps({"ts": last.ts, "title": last.title, "detail": last.detail}) + "\n")
        except Exception as e:
            dlog("event_log_write_error", str(e))


@dataclass
class ConsoleState:
    start_time: float
    config: ConsoleConfig
    token_store: TokenStore
    client: BackendClient
    auth: AuthGateway
    previews: PreviewRegistry
    dashboard: DashboardMonitor
    videos: VideoLibrary
    ebooks: EbookShelf
    certificates: ResourceManager
    members: MemberDirectory
    plans: ResourceManager
    purchases: PurchaseLedger
    receipts: ReceiptDesk
    events: ConsoleEventLog = field(default_factory=ConsoleEventLog)

    def manager(self, name: str) -> Optional[ResourceManager]:
        managers: Dict[str, ResourceManager] = {
            "videos": self.videos,
            "ebooks": self.ebooks,
            "certificates": self.certificates,
            "members": self.members,
            "plans": self.plans,
            "purchases": self.purchases,
            "receipts": self.receipts,
        }
        return managers.get(name)

    def teardown(self) -> None:
        """Stop dashboard polling and release every open preview."""
        self.dashboard.stop()
        self.previews.revoke_all()


def init_console_state(config: ConsoleConfig, token_store: TokenStore | None = None) -> ConsoleState:
    """Wire the token store, backend client and resource managers together."""
    store = token_store or TokenStore(path=config.session_file)
    store.load()
    client = BackendClient(base_url=config.api_url, token_store=store, timeout=config.timeout)
    events = ConsoleEventLog(path=config.event_log_path)
    return ConsoleState(
        start_time=time.time(),
        config=config,
        token_store=store,
        client=client,
        auth=AuthGateway(client, store),
        previews=PreviewRegistry(client),
        dashboard=DashboardMonitor(client, config.poll_seconds, enabled=config.polling_enabled),
        videos=VideoLibrary(client, VIDEO_SPEC, events.add),
        ebooks=EbookShelf(client, EBOOK_SPEC, events.add),
        certificates=ResourceManager(client, CERTIFICATE_SPEC, events.add),
        members=MemberDirectory(client, MEMBER_SPEC, events.add),
        plans=ResourceManager(client, PLAN_SPEC, events.add),
        purchases=PurchaseLedger(client, PURCHASE_SPEC, events.add),
        receipts=ReceiptDesk(client, RECEIPT_SPEC, events.add),
        events=events,
    )
