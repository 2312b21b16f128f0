from __future__ import annotations

import threading
from typing import Any, Dict, List, Mapping, Optional

from console.backend_client import ValidationError
from console.resources import READ_ONLY, ResourceManager, ResourceSpec, attr, full_name


RECEIPT_STATUSES = ("pending", "approved", "rejected")


PLAN_SPEC = ResourceSpec(
    name="plans",
    label="Plan",
    endpoint="/coachingplans/stripe",
    collection_key="plans",
    search=(attr("name"), attr("nickname")),
    operations=READ_ONLY,
)

PURCHASE_SPEC = ResourceSpec(
    name="purchases",
    label="Purchase",
    endpoint="/purchases",
    collection_key="purchases",
    search=(full_name("user"), attr("user.email"), attr("itemName"), attr("stripePaymentId")),
    filters={"itemType": attr("itemType")},
    operations=READ_ONLY,
    sort_key=attr("date"),
    sort_desc=True,
)

RECEIPT_SPEC = ResourceSpec(
    name="receipts",
    label="Receipt",
    endpoint="/receipts",
    collection_key="receipts",
    search=(full_name("user"), attr("user.email"), attr("priceId")),
    filters={"status": attr("status")},
    operations=READ_ONLY,
)


class PurchaseLedger(ResourceManager):
    def decorate(self, item: Dict[str, Any]) -> Dict[str, Any]:
        item = dict(item)
        name = full_name("user")(item)
        item["customer"] = name or "Deleted User"
        return item

    def item_types(self, purchases: List[Dict[str, Any]]) -> List[str]:
        return sorted({p["itemType"] for p in purchases if p.get("itemType")})


class ReceiptDesk(ResourceManager):
    """Bank-transfer receipts with approve/reject review actions.

    The last fetched list is kept so that a review action can update the
    affected entry in place instead of re-fetching the whole collection.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._lock = threading.Lock()
        self._items: List[Dict[str, Any]] = []

    def fetch(self) -> List[Dict[str, Any]]:
        items = super().fetch()
        with self._lock:
            self._items = items
        return [dict(item) for item in items]

    def cached(self, search: Optional[str] = "", filters: Optional[Mapping[str, Optional[str]]] = None) -> List[Dict[str, Any]]:
        with self._lock:
            items = [dict(item) for item in self._items]
        return self.filter(items, search, filters)

    def _review(self, receipt_id: str, action: str, status: str) -> Dict[str, Any]:
        if not receipt_id:
            raise ValidationError("Receipt id is required.")
        self.client.post_json(f"/receipts/{receipt_id}/{action}", {}, fallback_error=f"Failed to {action} receipt")
        updated: Dict[str, Any] = {"_id": receipt_id, "status": status}
        with self._lock:
            for idx, item in enumerate(self._items):
                if item.get("_id") == receipt_id:
                    self._items[idx] = {**item, "status": status}
                    updated = dict(self._items[idx])
                    break
        self._record(f"Receipt {status}", receipt_id)
        return updated

    def approve(self, receipt_id: str) -> Dict[str, Any]:
        return self._review(receipt_id, "approve", "approved")

    def reject(self, receipt_id: str) -> Dict[str, Any]:
        return self._review(receipt_id, "reject", "rejected")
