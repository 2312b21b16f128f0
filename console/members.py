from __future__ import annotations

from typing import Any, Dict, List, Optional

from console.backend_client import ConfirmationRequired, ValidationError
from console.resources import READ_ONLY, ResourceManager, ResourceSpec, attr, full_name


# Statuses an admin may assign. "inactive" ends the membership and needs confirmation.
MEMBER_STATUSES = ("paid", "pending", "failed", "cancelled", "inactive")
INACTIVE = "inactive"


def _membership(member: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    membership = member.get("membership")
    return membership if isinstance(membership, dict) and membership else None


def reported_status(member: Dict[str, Any]) -> Optional[str]:
    """The backend's payment status when it is one the editor knows, else None."""
    membership = _membership(member)
    if membership is None:
        return None
    status = str(membership.get("paymentStatus") or "").strip().lower()
    return status if status in MEMBER_STATUSES else None


def display_status(member: Dict[str, Any]) -> str:
    return reported_status(member) or INACTIVE


def member_plan(member: Dict[str, Any]) -> Optional[str]:
    membership = _membership(member) or {}
    plan = membership.get("plan")
    if isinstance(plan, dict):
        plan = plan.get("name")
    return plan or membership.get("priceId")


MEMBER_SPEC = ResourceSpec(
    name="members",
    label="Member",
    endpoint="/users",
    collection_key="users",
    search=(full_name(""), attr("email")),
    filters={"plan": member_plan, "status": display_status},
    operations=READ_ONLY,
)


class MemberDirectory(ResourceManager):
    """Member list with the constrained payment-status editor."""

    def decorate(self, item: Dict[str, Any]) -> Dict[str, Any]:
        item = dict(item)
        status = display_status(item)
        item["displayStatus"] = status.capitalize()
        item["statusLocked"] = reported_status(item) is None
        item["planName"] = member_plan(item)
        return item

    def plans(self, members: List[Dict[str, Any]]) -> List[str]:
        return sorted({m["planName"] for m in members if m.get("planName")})

    def _find(self, member_id: str) -> Dict[str, Any]:
        for member in self.fetch():
            if member.get("_id") == member_id or member.get("id") == member_id:
                return member
        raise ValidationError("Member not found.")

    def update_status(self, member_id: str, status: str, confirmed: bool = False) -> List[Dict[str, Any]]:
        status = (status or "").strip().lower()
        if status not in MEMBER_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(MEMBER_STATUSES)}")
        member = self._find(member_id)
        if member["statusLocked"]:
            raise ValidationError("This member has no active membership; status cannot be changed.")
        if status == INACTIVE and not confirmed:
            raise ConfirmationRequired(
                "Setting a member to inactive ends their membership. Please confirm to continue."
            )
        self.client.put_json(
            f"/members/{member_id}",
            {"paymentStatus": status},
            fallback_error="Failed to update member status",
        )
        self._record("Member status updated", f"{member.get('email') or member_id} -> {status}")
        return self.fetch()
